"""
Exceptions raised at the boundaries of the layout engine.

The layout core never raises on graph input. These errors belong to the
layers around it: validating model output and throttling requests.
"""


class AutoLayoutError(Exception):
    """Base class for all autolayout errors."""


class DiagramFormatError(AutoLayoutError):
    """Model output could not be turned into a diagram.

    Carries a stable ``code`` (``E_JSON`` or ``E_SCHEMA``) so the HTTP and
    CLI layers can report it without parsing the message.
    """

    def __init__(self, code: str, message: str, details: list | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or []

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        result = {"code": self.code, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class RateLimitError(AutoLayoutError):
    """A request arrived before the minimum interval elapsed."""

    def __init__(self, retry_after_ms: int) -> None:
        super().__init__("Please wait a moment before making another request.")
        self.retry_after_ms = retry_after_ms
