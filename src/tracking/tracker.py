"""
Identity tracking across video frames.

This module implements greedy nearest-centroid matching. Each detection, in
the order the ensemble produced it, is matched to the existing identity whose
last known centroid is closest, provided that distance is under
max_distance; otherwise a new identity is allocated. Matching is not
exclusive: two detections in one frame may resolve to the same identity.

Identities not matched for max_frames_since_seen frames are evicted. The
recency order lives in an explicit identity -> last-seen-frame map, so
eviction only visits stale entries.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from algorithms.geometry import centroid_distance
from models.detection import BoundingBox, Detection
from models.track import TrackAssignment, TrackRecord
from .smoothing import ConstantVelocityFilter


class IdentityTracker:
    """
    Assigns stable integer identities to detections across frames.

    The tracker is responsible for:
    - Matching detections to existing identities by centroid distance
    - Allocating new, never reused identities
    - Evicting identities that have not been seen for too long
    - Optionally smoothing each identity's centroid
    """

    def __init__(
        self,
        max_distance: float = 100.0,
        max_frames_since_seen: Optional[int] = 30,
        smoothing: bool = False,
    ):
        """
        Initialize the identity tracker.

        Args:
            max_distance: Matches must be strictly closer than this many pixels
            max_frames_since_seen: Frames an identity may go unmatched before
                                   eviction; None keeps identities forever
            smoothing: Attach a constant-velocity filter to each identity
        """
        self.max_distance = max_distance
        self.max_frames_since_seen = max_frames_since_seen
        self.smoothing = smoothing

        # creation order; used for matching and tie-breaks
        self.records: Dict[int, TrackRecord] = {}
        # identity -> last seen frame, least recently seen first
        self._last_seen: "OrderedDict[int, int]" = OrderedDict()
        self.next_identity = 0
        self.frame_index = 0

        logging.info("Identity tracker initialized")

    def update(self, detections: Iterable[Detection]) -> List[TrackAssignment]:
        """
        Update tracker with one frame's detections.

        Args:
            detections: Detections in production order

        Returns:
            One assignment per detection, in the same order
        """
        self.frame_index += 1

        assignments: List[TrackAssignment] = []
        for detection in detections:
            record = self._best_match(detection.bbox)
            if record is None:
                record = self._create(detection.bbox)
                assignments.append(TrackAssignment(record.identity, detection, is_new=True))
            else:
                self._refresh(record, detection.bbox)
                assignments.append(TrackAssignment(record.identity, detection))

        self._evict_stale()
        return assignments

    def _best_match(self, bbox: BoundingBox) -> Optional[TrackRecord]:
        """Closest record under max_distance; the first one wins on ties."""
        best: Optional[TrackRecord] = None
        best_distance = float("inf")

        for record in self.records.values():
            distance = centroid_distance(bbox, record.bbox)
            if distance < best_distance and distance < self.max_distance:
                best_distance = distance
                best = record

        return best

    def _create(self, bbox: BoundingBox) -> TrackRecord:
        record = TrackRecord(
            identity=self.next_identity,
            bbox=bbox,
            first_seen_frame=self.frame_index,
            last_seen_frame=self.frame_index,
            filter=ConstantVelocityFilter(bbox.center) if self.smoothing else None,
        )
        self.next_identity += 1

        self.records[record.identity] = record
        self._last_seen[record.identity] = self.frame_index
        logging.debug(f"[TRACK] new identity={record.identity} bbox={bbox.as_xywh()}")
        return record

    def _refresh(self, record: TrackRecord, bbox: BoundingBox) -> None:
        if record.filter is not None and record.last_seen_frame < self.frame_index:
            record.filter.predict(self.frame_index - record.last_seen_frame)
        if record.filter is not None:
            record.filter.correct(bbox.center)

        record.bbox = bbox
        record.last_seen_frame = self.frame_index
        record.hits += 1

        self._last_seen[record.identity] = self.frame_index
        self._last_seen.move_to_end(record.identity)

    def _evict_stale(self) -> None:
        """Remove identities that haven't been seen for too long."""
        if self.max_frames_since_seen is None:
            return

        while self._last_seen:
            identity, last_seen = next(iter(self._last_seen.items()))
            if self.frame_index - last_seen <= self.max_frames_since_seen:
                break
            del self._last_seen[identity]
            del self.records[identity]
            logging.debug(f"[TRACK] evicted identity={identity} last_seen={last_seen}")

    def get(self, identity: int) -> Optional[TrackRecord]:
        return self.records.get(identity)

    def get_all_tracks(self) -> List[TrackRecord]:
        """All live identities in creation order."""
        return list(self.records.values())

    def reset(self) -> None:
        """Forget every identity. Identities are still never reused."""
        self.records.clear()
        self._last_seen.clear()

    def __len__(self) -> int:
        return len(self.records)
