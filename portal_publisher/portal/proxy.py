"""Client for the Portal Publisher API.

See https://central.sonatype.org/publish/publish-portal-api/

Calls used:
  POST   /api/v1/publisher/upload           multipart bundle, 201 + deployment id
  GET    /api/v1/publisher/status?id=<id>   200 + JSON with deploymentState
  POST   /api/v1/publisher/deployment/<id>  publish, 204
  DELETE /api/v1/publisher/deployment/<id>  drop, 204

Bundle-level problems (rejected upload, failed or unreadable status) are
returned as FAILED states so the other bundles carry on. Transport
failures and rejected publish/drop calls raise PortalError.
"""

import logging
from typing import Optional

import httpx

from portal_publisher.collector.types import Bundle
from portal_publisher.config import PortalCredentials
from portal_publisher.extract import ExtractionError, JsonExtractor
from portal_publisher.portal.types import (
    REPO_ID_UNASSIGNED,
    BundleRepositoryState,
    DeploymentState,
    PortalError,
    RepositoryStateInfo,
)

logger = logging.getLogger(__name__)

PUBLISHER_API_BASE_URL = "https://central.sonatype.com"
UPLOAD_RESOURCE_PATH = "/api/v1/publisher/upload"
STATUS_RESOURCE_PATH = "/api/v1/publisher/status"
DEPLOYMENT_RESOURCE_PATH = "/api/v1/publisher/deployment"

USER_AGENT = "portal-publisher"

# Timeouts (seconds)
UPLOAD_TIMEOUT = 90
ACTION_TIMEOUT = 30
STATUS_TIMEOUT = 15
CONNECT_TIMEOUT = 10


class PortalProxy:
    """Proxy for the Portal Publisher API web service."""

    def __init__(
        self,
        credentials: PortalCredentials,
        base_url: str = PUBLISHER_API_BASE_URL,
        client: Optional[httpx.Client] = None,
    ):
        self._client = client or httpx.Client(follow_redirects=True)
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "User-Agent": USER_AGENT,
            "Authorization": credentials.as_authorization_value(),
        }

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PortalProxy":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def upload_bundle(self, bundle: Bundle) -> BundleRepositoryState:
        """Upload a bundle jar as multipart/form-data.

        A 201 response carries the assigned deployment id as plain text.
        """
        path = UPLOAD_RESOURCE_PATH
        try:
            with bundle.bundle_jar.open("rb") as fh:
                response = self._send(
                    "POST",
                    path,
                    UPLOAD_TIMEOUT,
                    files={"bundle": (bundle.name, fh, "application/octet-stream")},
                )
        except OSError as exc:
            raise PortalError(f"Failed reading bundle {bundle.bundle_jar}") from exc

        if response.status_code == httpx.codes.CREATED:
            repo_id = response.text.strip()
            logger.info("Uploaded %s, assigned id %s", bundle.name, repo_id)
            return BundleRepositoryState(
                bundle, repo_id, RepositoryStateInfo.pending(f"Assigned id: {repo_id}")
            )

        logger.warning("Upload of %s rejected (%d)", bundle.name, response.status_code)
        return BundleRepositoryState(
            bundle,
            REPO_ID_UNASSIGNED,
            RepositoryStateInfo.failed(
                f"Failed to upload bundle ({response.status_code}), message: {response.text}"
            ),
        )

    def get_deployment_status(self, deployment_id: str) -> RepositoryStateInfo:
        """Probe the deployment state. Anything unexpected is reported as FAILED."""
        response = self._send(
            "GET", STATUS_RESOURCE_PATH, STATUS_TIMEOUT, params={"id": deployment_id}
        )
        status = response.status_code
        body = response.text

        if status != httpx.codes.OK:
            return RepositoryStateInfo.failed(
                f"Failed repository probe; status: {status}, message: {body}"
            )

        try:
            state_name = JsonExtractor(body).get_string("deploymentState")
            state = DeploymentState.from_name(state_name)
        except (ExtractionError, KeyError) as exc:
            logger.debug("Unreadable status for %s: %s", deployment_id, exc)
            return RepositoryStateInfo.failed(f"Failed parsing response message: {body}")

        # The errors of a failed deployment are in the response body
        info = body if state is DeploymentState.FAILED else ""
        return RepositoryStateInfo(state, info)

    def publish_repositories(self, repo_ids: list[str]) -> None:
        """Publish deployments; any response but 204 fails the whole call.

        Bundles that were never assigned an id have nothing to publish.
        """
        for repo_id in repo_ids:
            if repo_id == REPO_ID_UNASSIGNED:
                continue
            response = self._send("POST", f"{DEPLOYMENT_RESOURCE_PATH}/{repo_id}", ACTION_TIMEOUT)
            if response.status_code != httpx.codes.NO_CONTENT:
                raise PortalError(
                    f"Publishing {repo_id} returned {response.status_code} : {response.text}"
                )

    def drop_repositories(self, repo_ids: list[str]) -> None:
        """Drop deployments; any response but 204 fails the whole call.

        Bundles that were never assigned an id have nothing to drop.
        """
        for repo_id in repo_ids:
            if repo_id == REPO_ID_UNASSIGNED:
                continue
            response = self._send("DELETE", f"{DEPLOYMENT_RESOURCE_PATH}/{repo_id}", ACTION_TIMEOUT)
            if response.status_code != httpx.codes.NO_CONTENT:
                raise PortalError(
                    f"Dropping {repo_id} returned {response.status_code} : {response.text}"
                )

    def _send(self, method: str, path: str, timeout: float, **kwargs) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("Calling %s on %s", method, url)
        try:
            response = self._client.request(
                method,
                url,
                headers=self._headers,
                timeout=httpx.Timeout(timeout, connect=CONNECT_TIMEOUT),
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise PortalError(f"Failed while {method} to {path}: {exc}") from exc
        logger.debug("Response %d body %s", response.status_code, response.text)
        return response
