"""Exception hierarchy for the zippy player."""


class ZippyError(Exception):
    """Base exception for all application-specific errors."""


class NoInputError(ZippyError):
    """Raised when there is no path and stdin is an interactive terminal."""


class StreamInitError(ZippyError):
    """Raised when a playback stream cannot be constructed.

    ``show_usage`` tells the CLI whether the failure stems from how the
    program was invoked (missing input) rather than from the input itself.
    """

    def __init__(self, message: str, *, show_usage: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.show_usage = show_usage


class StreamReadError(ZippyError):
    """Raised (or stored) when reading the input fails mid-stream."""
