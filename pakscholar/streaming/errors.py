"""Exceptions raised along the streaming session lifecycle.

Unknown or expired session ids are not exceptions: the registry signals them
with ``None`` / ``False`` return values and the API maps those to 404.
"""


class StreamError(Exception):
    """Base class for failures that end a turn with a client-visible message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputValidationError(StreamError):
    """Raised when a submission has no usable input or an unsupported attachment."""


class UpstreamError(StreamError):
    """Raised when building context, reading an attachment, or generating fails."""


class SafetyRejection(UpstreamError):
    """Raised when the model flags a produced unit as policy-violating."""

    def __init__(self, message: str = "Response blocked due to safety settings.") -> None:
        super().__init__(message)
