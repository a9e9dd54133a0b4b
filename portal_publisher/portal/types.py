"""Deployment state types for the Portal Publisher API."""

from dataclasses import dataclass
from enum import Enum

from portal_publisher.collector.types import Bundle

# Dummy id for a bundle the Portal did not accept
REPO_ID_UNASSIGNED = "_unassigned_"


class PortalError(Exception):
    """Raised when a Portal call fails at the transport level or a bulk action is rejected."""


class DeploymentState(Enum):
    """The deployment state reported by the Portal.

    The value is the transitioning flag: True while the Portal is still
    working on the deployment, False once the state is terminal.
    """

    # Uploaded and waiting for the validation service
    PENDING = ("PENDING", True)
    # Being processed by the validation service
    VALIDATING = ("VALIDATING", True)
    # Passed validation, waiting to be published
    VALIDATED = ("VALIDATED", False)
    # Published and being uploaded to Maven Central
    PUBLISHING = ("PUBLISHING", True)
    # Uploaded to Maven Central
    PUBLISHED = ("PUBLISHED", False)
    # Errors are reported in the status response
    FAILED = ("FAILED", False)

    @property
    def is_transitioning(self) -> bool:
        return self.value[1]

    @classmethod
    def from_name(cls, name: str) -> "DeploymentState":
        """Look up a state by name; raises KeyError for unknown names."""
        return cls[name]


@dataclass(frozen=True)
class RepositoryStateInfo:
    """One status probe result: the state and any diagnostic text."""

    state: DeploymentState
    info: str = ""

    @classmethod
    def pending(cls, info: str) -> "RepositoryStateInfo":
        return cls(DeploymentState.PENDING, info)

    @classmethod
    def failed(cls, info: str) -> "RepositoryStateInfo":
        return cls(DeploymentState.FAILED, info)


@dataclass(frozen=True)
class BundleRepositoryState:
    """A bundle, its assigned Portal deployment id and the latest state."""

    bundle: Bundle
    assigned_id: str
    latest_state_info: RepositoryStateInfo

    @property
    def status(self) -> DeploymentState:
        return self.latest_state_info.state

    @property
    def is_transitioning(self) -> bool:
        return self.status.is_transitioning

    @property
    def is_assigned(self) -> bool:
        return self.assigned_id != REPO_ID_UNASSIGNED

    def to_dict(self) -> dict:
        return {
            "bundle": self.bundle.name,
            "deployment_id": self.assigned_id,
            "state": self.status.name,
            "info": self.latest_state_info.info,
        }
