from __future__ import annotations

from abc import ABC, abstractmethod

from voxlate.contracts import CaptureResult


class AudioCaptureAdapter(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def start(self, language_hint: str) -> CaptureResult:
        """
        Begin one capture and resolve with its single terminal outcome.
        Resolves on `stop()` or when the capture ends on its own; raises CaptureError on failure.
        """
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        """Ask the pending capture to finish. No-op when nothing is recording."""
        raise NotImplementedError
