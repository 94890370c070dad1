"""Custom exceptions for the report pipeline."""


class ReportError(Exception):
    """Base exception for report pipeline errors."""

    pass


class SettingsLoadError(ReportError):
    """Failed to load or validate the settings file."""

    pass


class ReportContractError(ReportError, TypeError):
    """Aggregation was called with inputs that break its contract.

    Raised for calling-code bugs only (a row-set that is not a sequence,
    an unknown report type key). Bad cell data never raises.
    """

    def __init__(self, message: str, offending: object = None):
        self.offending = offending
        super().__init__(message)


class StaleSessionError(ReportError):
    """Aggregation requested on an upload session that was cancelled."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Upload session {session_id} was cancelled and cannot be aggregated")


class IncompleteSessionError(ReportError):
    """Aggregation requested before every expected file was submitted."""

    def __init__(self, session_id: str, expected: int, received: int):
        self.session_id = session_id
        self.expected = expected
        self.received = received
        super().__init__(
            f"Upload session {session_id} has {received} of {expected} files; "
            f"aggregation must wait for all files"
        )
