"""
Track models for identity tracking state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .detection import BoundingBox, Detection


@dataclass
class TrackRecord:
    """
    A tracked identity across video frames.

    Attributes:
        identity: Unique integer identity, assigned once at creation.
        bbox: Last known bounding box.
        first_seen_frame: Tracker frame index when the identity was created.
        last_seen_frame: Tracker frame index of the latest match.
        hits: Number of detections matched to this identity.
        filter: Optional smoothing state (see tracking.smoothing).
    """
    identity: int
    bbox: BoundingBox
    first_seen_frame: int
    last_seen_frame: int
    hits: int = 1
    filter: Optional[Any] = None

    @property
    def center(self) -> Tuple[float, float]:
        return self.bbox.center

    @property
    def age(self) -> int:
        """Frames between creation and the latest match."""
        return self.last_seen_frame - self.first_seen_frame

    @property
    def smoothed_center(self) -> Tuple[float, float]:
        """Filtered centroid when smoothing is enabled, raw centroid otherwise."""
        if self.filter is None:
            return self.center
        return self.filter.center


@dataclass(frozen=True)
class TrackAssignment:
    """
    Identity resolved for one detection in one tracker update.

    Attributes:
        identity: Identity of the matched (or newly created) record.
        detection: The detection that was assigned.
        is_new: Whether the identity was created by this detection.
    """
    identity: int
    detection: Detection
    is_new: bool = False
