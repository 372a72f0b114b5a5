"""Error types shared across SheetMate."""

from typing import Optional


class SheetMateError(Exception):
    """Base class for SheetMate errors."""


class MissingCredentialError(SheetMateError):
    """Raised when no API key is configured for the selected provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__("Please configure your API key in Settings")


class ProviderError(SheetMateError):
    """A provider returned a non-success status or could not be reached."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class ResponseParseError(SheetMateError):
    """Tool arguments or an embedded operations block could not be parsed."""


class OperationApplyError(SheetMateError):
    """A single operation failed against the spreadsheet host."""

    def __init__(self, index: int, action: str, message: str):
        self.index = index
        self.action = action
        self.message = message
        super().__init__(f"Operation {index} ({action}) failed: {message}")

    def to_dict(self) -> dict:
        return {"index": self.index, "action": self.action, "message": self.message}
