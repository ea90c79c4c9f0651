""" Waiting for a restarted instance to come back up
"""
import time

import rolling_restart.io
from rolling_restart.state import DEFAULT_HEALTHY_UPTIME


class HealthPoller:
    """Poll an app's instance status until one instance has freshly restarted.

    Only the observation is retried: if the status query itself fails, the ``CfError`` propagates to the caller on the
    first failure. ``sleep`` is called with ``interval`` between attempts, never after the last one.
    """

    def __init__(self, connection, spinner, interval=1, healthy_uptime=DEFAULT_HEALTHY_UPTIME, sleep=time.sleep):
        self.connection = connection
        self.spinner = spinner
        self.interval = interval
        self.healthy_uptime = healthy_uptime
        self.sleep = sleep

    def is_healthy(self, app_guid, instance_key):
        statuses = self.connection.get_instance_statuses(app_guid)
        status = statuses.get(instance_key)
        if status is None:
            rolling_restart.io.debug(f"Instance {instance_key} not present in status of app {app_guid}")
            return False
        rolling_restart.io.debug(f"Instance {instance_key} is {status.state}, uptime {status.uptime}s")
        return status.is_fresh(self.healthy_uptime)

    def confirm_healthy(self, app_guid, instance_key, max_cycles):
        """Return True as soon as the instance is healthy, False if ``max_cycles`` checks all failed."""
        for cycle in range(max_cycles):
            if cycle:
                self.sleep(self.interval)
            self.spinner.next()
            if self.is_healthy(app_guid, instance_key):
                self.spinner.done()
                return True
        return False
