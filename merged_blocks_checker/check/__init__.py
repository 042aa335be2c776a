"""
Merged blocks integrity check.

Walks a store's bundles in order, reports covered and missing ranges,
and optionally decodes every block to verify fork linkability.
"""

from .continuity import PROGRESS_INTERVAL, ContinuityTracker
from .forks import LARGE_GAP_INTERVAL, ForkLinkabilityTracker
from .modes import PrintDetails
from .report import CheckSummary, EventKind, ReportEvent, Reporter, ReportListener
from .runner import check_merged_blocks, run_check
from .segment import SegmentResult, SegmentValidator
from .state import ForkTrackingState, TrackingState

__all__ = [
    # Entry points
    "check_merged_blocks",
    "run_check",
    # Components
    "ContinuityTracker",
    "ForkLinkabilityTracker",
    "SegmentValidator",
    "SegmentResult",
    "Reporter",
    # State and results
    "TrackingState",
    "ForkTrackingState",
    "CheckSummary",
    "ReportEvent",
    "ReportListener",
    "EventKind",
    "PrintDetails",
    # Constants
    "PROGRESS_INTERVAL",
    "LARGE_GAP_INTERVAL",
]
