"""Portal module: Publisher API client and deployment states.

Public API:
    PortalProxy(credentials).upload_bundle(bundle) -> BundleRepositoryState
    PortalProxy(credentials).get_deployment_status(id) -> RepositoryStateInfo
"""

from portal_publisher.portal.proxy import PortalProxy
from portal_publisher.portal.types import (
    REPO_ID_UNASSIGNED,
    BundleRepositoryState,
    DeploymentState,
    PortalError,
    RepositoryStateInfo,
)

__all__ = [
    "REPO_ID_UNASSIGNED",
    "BundleRepositoryState",
    "DeploymentState",
    "PortalError",
    "PortalProxy",
    "RepositoryStateInfo",
]
