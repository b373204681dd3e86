"""
Frame source interface.

The runner pulls frames from a source and hands them to the pipeline
controller. Sources own their capture device and nothing else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from models.frame import FrameData


@dataclass
class ObservationConfig:
    """Settings shared by every source. None leaves the device default."""
    source_id: str = "default"
    resolution: Optional[Tuple[int, int]] = None
    fps: Optional[int] = None


class ObservationSource(ABC):
    """
    Pull-based frame source.

    Call open(), then read() until it returns None, then close(). Sources are
    also context managers and iterate over FrameData once open.
    """

    def __init__(self, config: ObservationConfig):
        self.config = config
        self.frames_read = 0
        self._opened = False

    @property
    def source_id(self) -> str:
        return self.config.source_id

    @property
    def is_open(self) -> bool:
        return self._opened

    @abstractmethod
    def open(self) -> None:
        """Acquire the device. Raises RuntimeError when it cannot be opened."""

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """Next frame, or None at end of stream or on a read failure."""

    @abstractmethod
    def close(self) -> None:
        """Release the device; calling it twice is harmless."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        if not self._opened:
            raise RuntimeError(f"Source {self.source_id!r} is not open")

        frame_data = self.read()
        while frame_data is not None:
            yield frame_data
            frame_data = self.read()
