"""Custom exceptions for team health analytics."""


class TeamHealthError(Exception):
    """Base exception for all team health analytics errors."""

    pass


class InvalidWeekIdentifier(TeamHealthError, ValueError):
    """Raised when a week identifier is not in ``YYYY-WNN`` form."""

    def __init__(self, week_id: object):
        super().__init__(f"Invalid week identifier {week_id!r}, expected YYYY-WNN")
        self.week_id = week_id


class ExportError(TeamHealthError):
    """Base exception for Slack export reading errors."""

    def __init__(self, message: str, source: str | None = None):
        """Initialize export error.

        Args:
            message: Error message
            source: Path or URL that failed
        """
        super().__init__(message)
        self.source = source


class ExportNotConfiguredError(ExportError):
    """Raised when no export location has been configured."""

    pass


class ExportNotFoundError(ExportError):
    """Raised when a required export file (users.json, channels.json) is missing."""

    pass


class ExportReadError(ExportError):
    """Raised when a required export file cannot be read or decoded."""

    pass
