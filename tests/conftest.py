import io
import json

import pytest

from rolling_restart import io as rr_io
from rolling_restart.cf import CliConnection
from rolling_restart.errors import CfError
from rolling_restart.state import parse_instance_statuses

TWO_INSTANCES = {
    "0": {"state": "RUNNING", "uptime": 5, "since": 1511990275},
    "1": {"state": "RUNNING", "uptime": 5, "since": 1511990327},
}
ALWAYS_STARTING = {
    "0": {"state": "STARTING", "uptime": 5, "since": 1511990275},
    "1": {"state": "RUNNING", "uptime": 5, "since": 1511990327},
}
SINGLE_INSTANCE = {
    "0": {"state": "RUNNING", "uptime": 5, "since": 1511990275},
}


class FakeConnection(CliConnection):
    """In-memory cf session.

    ``responses`` is a list of instance status payloads (dicts, or raw strings) returned by successive status queries,
    the last one is repeated once the list is exhausted. Every call is recorded in ``calls``.
    """

    def __init__(self, responses=None, logged_in=True, org=True, space=True, app_guid="valid-app-guid", errors=None):
        self.responses = list(responses or [TWO_INSTANCES])
        self.logged_in = logged_in
        self.org = org
        self.space = space
        self.app_guid = app_guid
        self.errors = errors or {}
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        error = self.errors.get(name)
        if error is not None:
            raise CfError(error)

    def is_logged_in(self):
        self._call("is_logged_in")
        return self.logged_in

    def has_organization(self):
        self._call("has_organization")
        return self.org

    def has_space(self):
        self._call("has_space")
        return self.space

    def get_app_guid(self, app_name):
        self._call("get_app_guid", app_name)
        return self.app_guid

    def get_instance_statuses(self, app_guid):
        self._call("get_instance_statuses", app_guid)
        if len(self.responses) > 1:
            response = self.responses.pop(0)
        else:
            response = self.responses[0]
        if not isinstance(response, str):
            response = json.dumps(response)
        return parse_instance_statuses(response)

    def restart_instance(self, app_name, instance_key):
        self._call("restart_instance", app_name, instance_key)

    def scale_application(self, app_name, instance_count):
        self._call("scale_application", app_name, instance_count)

    def calls_to(self, name):
        return [call[1:] for call in self.calls if call[0] == name]

    def mutating_calls(self):
        return [call for call in self.calls if call[0] in ("restart_instance", "scale_application")]


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return rr_io.Console(file=output)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture(autouse=True)
def reset_debug():
    try:
        yield
    finally:
        rr_io.DEBUG = False
