"""
Tracking module.

The canonical tracker implementation is in tracking.tracker.
"""

from .smoothing import ConstantVelocityFilter
from .tracker import IdentityTracker

__all__ = ["IdentityTracker", "ConstantVelocityFilter"]
