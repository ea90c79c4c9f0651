""" Failure types raised while performing a rolling restart.

Every abort of the restart workflow is a ``RollingRestartError``. ``notice`` is an optional line of context printed
before the failure banner (e.g. which instance could not be restarted), the exception text itself is printed after it.
"""


class CfError(Exception):
    """A query or command issued through the cf CLI failed."""


class RollingRestartError(Exception):
    exit_code = 1

    def __init__(self, message, notice=None):
        super().__init__(message)
        self.notice = notice


class UsageError(RollingRestartError):
    """Bad, missing or duplicate command line arguments."""


class PreconditionError(RollingRestartError):
    """The cf session is not logged in or has no org/space targeted."""


class CollaboratorError(RollingRestartError):
    """The platform rejected or failed a query or command."""


class TopologyError(RollingRestartError):
    """The application has too few instances for a zero-downtime restart."""


class HealthTimeoutError(RollingRestartError):
    """An instance did not report healthy within the polling budget."""
