"""Types for the bundle publisher."""

from dataclasses import dataclass
from enum import StrEnum

from portal_publisher.portal.types import BundleRepositoryState


class ExecutedAction(StrEnum):
    """The repository action actually executed."""

    DROPPED = "dropped"
    KEPT = "kept"
    PROMOTED = "promoted"


@dataclass(frozen=True)
class PublishingResult:
    """Outcome of a publishing run.

    all_repos_valid alone decides whether the run succeeded, regardless of
    which action was executed.
    """

    executed_action: ExecutedAction
    all_repos_valid: bool
    final_states: tuple[BundleRepositoryState, ...]

    def to_dict(self) -> dict:
        return {
            "executed_action": self.executed_action.value,
            "all_repos_valid": self.all_repos_valid,
            "bundles": [s.to_dict() for s in self.final_states],
        }
