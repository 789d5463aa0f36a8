from __future__ import annotations

import contextlib
import threading
from typing import Iterator, Optional

from voxlate.contracts import AudioChunk


class MicError(RuntimeError):
    pass


def _import_sounddevice():
    try:
        import sounddevice as sd
    except ImportError as e:
        raise MicError(
            "sounddevice is not installed. Install with: python -m pip install sounddevice"
        ) from e
    except OSError as e:
        # Raised when the PortAudio shared library itself is missing.
        raise MicError(f"PortAudio is unavailable: {e}") from e
    return sd


class SoundDeviceMicSource:
    """
    Microphone source using the `sounddevice` package (PortAudio).
    Yields raw PCM16 chunks of fixed duration until the stop event is set.
    """

    def __init__(
        self,
        *,
        chunk_seconds: float = 0.25,
        sample_rate: int = 16000,
        channels: int = 1,
        device: Optional[int] = None,
    ) -> None:
        if chunk_seconds <= 0:
            raise ValueError("chunk_seconds must be > 0")
        if sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if channels not in (1, 2):
            raise ValueError("channels must be 1 or 2 (for now)")

        self.chunk_seconds = float(chunk_seconds)
        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self.device = device

    @staticmethod
    def list_devices() -> str:
        sd = _import_sounddevice()
        return str(sd.query_devices())

    def has_input_device(self) -> bool:
        try:
            sd = _import_sounddevice()
        except MicError:
            return False
        try:
            info = sd.query_devices(self.device, kind="input")
        except Exception:
            return False
        return int(info.get("max_input_channels", 0)) > 0

    @contextlib.contextmanager
    def _open_stream(self):
        sd = _import_sounddevice()
        try:
            stream = sd.RawInputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                device=self.device,
                blocksize=0,  # let PortAudio choose
            )
        except Exception as e:
            raise MicError(
                "Failed to open microphone stream. "
                "Try --list-devices and select a device id with --device."
            ) from e

        with stream:
            yield stream

    def chunks(self, stop_event: threading.Event | None = None) -> Iterator[AudioChunk]:
        frames_per_chunk = max(1, int(round(self.chunk_seconds * self.sample_rate)))
        frames_seen = 0

        with self._open_stream() as stream:
            while stop_event is None or not stop_event.is_set():
                try:
                    data, _overflowed = stream.read(frames_per_chunk)
                except Exception as e:
                    raise MicError(f"Microphone read failed: {e}") from e

                start_time = frames_seen / self.sample_rate
                frames_seen += frames_per_chunk
                yield AudioChunk(
                    pcm16=bytes(data),
                    sample_rate=self.sample_rate,
                    channels=self.channels,
                    start_time=start_time,
                    duration=frames_per_chunk / self.sample_rate,
                )
