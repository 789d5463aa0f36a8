from __future__ import annotations


class VoxlateError(RuntimeError):
    """Base for failures surfaced to the user through `Session.last_error`."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return str(self)


class CaptureError(VoxlateError):
    default_message = "Speech capture failed."


class PayloadTooLarge(VoxlateError):
    default_message = "The audio file is too large."

    def __init__(self, size: int, limit: int) -> None:
        self.size = int(size)
        self.limit = int(limit)
        super().__init__(f"The audio file is too large ({self.size} bytes, limit {self.limit} bytes).")


class RemoteCallError(VoxlateError):
    default_message = "Failed to get translation."


class PlaybackError(VoxlateError):
    default_message = "Could not synthesize speech."


class UnsupportedEnvironment(VoxlateError):
    default_message = "Speech capture is not supported in this environment."


class InvalidTransition(RuntimeError):
    pass
