""" Classes to represent the instance state reported by Cloud Foundry and the
state of a single rolling restart.
"""
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, TypeAdapter, ValidationError
from pydantic_core import PydanticUseDefault

from rolling_restart.errors import CfError


RUNNING = "RUNNING"
DEFAULT_HEALTHY_UPTIME = 10
# the instance added when bracketing a single-instance app with a scale-up
SCALED_INSTANCE_KEY = "1"


def none_to_default(cls, value: Any) -> Any:
    if value is None:
        raise PydanticUseDefault()
    return value


class InstanceStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    state: str
    uptime: int = 0
    since: int = 0

    # the platform reports null for instances that never started
    _normalize_uptime = field_validator("uptime", "since", mode="before")(none_to_default)

    def is_fresh(self, healthy_uptime=DEFAULT_HEALTHY_UPTIME):
        # RUNNING alone may still be the pre-restart process, a low uptime means we are looking at the new one
        return self.state == RUNNING and self.uptime < healthy_uptime


InstanceStatusMap = Dict[str, InstanceStatus]

_instance_status_map = TypeAdapter(InstanceStatusMap)


def parse_instance_statuses(payload: str) -> InstanceStatusMap:
    """Parse the body of ``GET /v2/apps/:guid/instances``."""
    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise CfError(f"Invalid instance information returned by Cloud Foundry: {exc}")
    if isinstance(data, dict) and "error_code" in data:
        description = data.get("description") or data["error_code"]
        raise CfError(f"Cloud Foundry returned an error: {description}")
    try:
        return _instance_status_map.validate_python(data)
    except ValidationError as exc:
        raise CfError(f"Invalid instance information returned by Cloud Foundry: {exc}")


def _instance_key_order(key):
    if key.isdigit():
        return (0, int(key), key)
    return (1, 0, key)


def ordered_instance_keys(statuses: InstanceStatusMap) -> List[str]:
    """Instance indexes in restart order: numerically ascending, any non-numeric keys last."""
    return sorted(statuses, key=_instance_key_order)


class RestartSession(BaseModel):
    app_name: str
    max_cycles: int
    app_guid: Optional[str] = None
    instance_keys: List[str] = []
    instance_count: int = 0
    scaled_up: bool = False
    restarted: List[str] = []

    @property
    def single_instance(self):
        return self.instance_count == 1
