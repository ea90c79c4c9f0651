""" Zero-downtime restart of all instances of a single application
"""
import rolling_restart.io
from rolling_restart.errors import (
    CfError,
    CollaboratorError,
    HealthTimeoutError,
    PreconditionError,
    RollingRestartError,
    TopologyError,
    UsageError,
)
from rolling_restart.io import Console
from rolling_restart.poller import HealthPoller
from rolling_restart.state import (
    ordered_instance_keys,
    RestartSession,
    SCALED_INSTANCE_KEY,
)

USAGE = "cfctl rolling-restart APP_NAME"
NOT_LOGGED_IN = "You are not logged in, please log in and try again."
NO_ORG = "The logged in user does not have an Org set, please select an Org and Space and try again."
NO_SPACE = "The logged in user does not have a Space set, please select a Space and try again."
TOO_FEW_INSTANCES = (
    "There are too few instances to ensure zero-downtime, use `cf restart APP_NAME` if you are OK with downtime."
)


def app_name_from_args(app_names):
    if not app_names:
        raise UsageError(f"An application name was not provided. Usage: {USAGE}")
    if len(app_names) > 1:
        raise UsageError("Only a single app name is currently supported, please try again.")
    return app_names[0]


def max_cycles_from_args(max_cycles, default):
    if max_cycles is None:
        return default
    if max_cycles < 0:
        raise UsageError(f"--max-cycles must be zero or a positive number, got {max_cycles}.")
    return max_cycles


class RestartController:
    """Restart an application's instances one at a time, waiting for each to be healthy before moving on.

    Applications with a single instance are temporarily scaled up to two instances so that one is always serving.
    Any failure aborts the run immediately: instances that were already restarted are left as they are.
    """

    def __init__(self, connection, console=None, poller=None, poll_interval=1, healthy_uptime=None, sleep=None):
        self.connection = connection
        self.console = console or Console()
        if poller is None:
            poller_kwargs = {"interval": poll_interval}
            if healthy_uptime is not None:
                poller_kwargs["healthy_uptime"] = healthy_uptime
            if sleep is not None:
                poller_kwargs["sleep"] = sleep
            poller = HealthPoller(connection, self.console.spinner, **poller_kwargs)
        self.poller = poller

    def run(self, app_name, max_cycles):
        """Perform the rolling restart, returning the process exit code."""
        session = RestartSession(app_name=app_name, max_cycles=max_cycles)
        try:
            self._restart(session)
        except RollingRestartError as exc:
            exit_code = self.abort(exc)
            if session.restarted:
                # nothing is rolled back, tell the operator how far the restart got
                self.console.echo("Instances already restarted: %s.", ", ".join(session.restarted))
            return exit_code
        return 0

    def abort(self, error):
        if error.notice:
            self.console.echo(error.notice)
        self.console.failed(str(error))
        return error.exit_code

    def check_session(self):
        checks = (
            (self.connection.is_logged_in, NOT_LOGGED_IN),
            (self.connection.has_organization, NO_ORG),
            (self.connection.has_space, NO_SPACE),
        )
        for check, message in checks:
            try:
                ok = check()
            except CfError as exc:
                raise PreconditionError(str(exc))
            if not ok:
                raise PreconditionError(message)

    def _instance_info_error(self, session, exc):
        return CollaboratorError(str(exc), notice=f"Failed to get the instance information for {session.app_name}.")

    def _restart(self, session):
        self.check_session()

        try:
            session.app_guid = self.connection.get_app_guid(session.app_name)
        except CfError as exc:
            raise CollaboratorError(str(exc))

        try:
            statuses = self.connection.get_instance_statuses(session.app_guid)
        except CfError as exc:
            raise self._instance_info_error(session, exc)

        session.instance_keys = ordered_instance_keys(statuses)
        session.instance_count = len(session.instance_keys)
        rolling_restart.io.debug(f"Instances of {session.app_name} ({session.app_guid}): {session.instance_keys}")

        if session.single_instance:
            self._scale_up(session)
        elif session.instance_count < 2:
            raise TopologyError(TOO_FEW_INSTANCES)

        self.console.echo("Beginning restart of app instances for %s.", session.app_name)
        for instance_key in session.instance_keys:
            self._restart_instance(session, instance_key)

        if session.scaled_up:
            self._scale_down(session)

        self.console.echo("Finished restart of app instances for %s.", session.app_name)

    def _restart_instance(self, session, instance_key):
        try:
            self.connection.restart_instance(session.app_name, instance_key)
        except CfError as exc:
            raise CollaboratorError(str(exc), notice=f"Failed to restart instance {instance_key}.")

        self.console.echo("Checking status of instance %s.", instance_key)
        if not self._wait(session, instance_key):
            raise HealthTimeoutError(
                f"Application did not restart within {session.max_cycles} Second(s), failing out. "
                "Check your current application state."
            )
        session.restarted.append(instance_key)

    def _wait(self, session, instance_key):
        try:
            return self.poller.confirm_healthy(session.app_guid, instance_key, session.max_cycles)
        except CfError as exc:
            raise self._instance_info_error(session, exc)

    def _scale_up(self, session):
        self.console.echo("Only one instance of %s is running, scaling up to 2 instances.", session.app_name)
        try:
            self.connection.scale_application(session.app_name, 2)
        except CfError as exc:
            raise CollaboratorError(str(exc), notice=f"Failed to scale {session.app_name} to 2 instances.")
        session.scaled_up = True

        self.console.echo("Checking status of instance %s.", SCALED_INSTANCE_KEY)
        if not self._wait(session, SCALED_INSTANCE_KEY):
            self.console.warn(
                "Instance %s did not report healthy within %d Second(s), continuing.",
                SCALED_INSTANCE_KEY,
                session.max_cycles,
            )
        self.console.echo("Scaled %s to 2 instances.", session.app_name)

    def _scale_down(self, session):
        self.console.echo("Scaling %s back down to 1 instance.", session.app_name)
        try:
            self.connection.scale_application(session.app_name, 1)
        except CfError as exc:
            # the restart itself succeeded, leave the extra instance running and tell the operator
            self.console.warn("Failed to scale %s back down to 1 instance: %s", session.app_name, exc)
            return
        self.console.echo("Scaled %s back down to 1 instance.", session.app_name)
