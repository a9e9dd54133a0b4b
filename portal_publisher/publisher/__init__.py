"""Publisher module: drives uploaded bundles to a terminal state.

Public API:
    BundlePublisher(portal, initial_pause, loop_pause).publish(bundles, action) -> PublishingResult
"""

from portal_publisher.publisher.publisher import BundlePublisher, advance_state, make_summary
from portal_publisher.publisher.types import ExecutedAction, PublishingResult

__all__ = [
    "BundlePublisher",
    "ExecutedAction",
    "PublishingResult",
    "advance_state",
    "make_summary",
]
