"""Bundle publisher: uploads bundles and follows them until they settle.

The flow:
1. Upload all bundles (a rejected upload is a FAILED state, not an error)
2. Poll the transitioning deployments until none is left. The pause before
   each round scales with the number of deployments still in transition:
       first round:  initial_pause * bundle_count
       later rounds: loop_pause * transitioning_count
3. Drop, keep or promote the deployments as requested. Promotion only
   happens when every deployment is valid; otherwise the promote fallback
   (keep by default) is used.
"""

import logging
import time
from typing import Callable, Iterable, Protocol

from portal_publisher.collector.types import Bundle
from portal_publisher.config import PromoteFallback, TargetAction
from portal_publisher.portal.types import (
    BundleRepositoryState,
    DeploymentState,
    RepositoryStateInfo,
)
from portal_publisher.publisher.types import ExecutedAction, PublishingResult

logger = logging.getLogger(__name__)

VALID_STATES = frozenset({DeploymentState.VALIDATED, DeploymentState.PUBLISHED})


class Portal(Protocol):
    def upload_bundle(self, bundle: Bundle) -> BundleRepositoryState: ...

    def get_deployment_status(self, deployment_id: str) -> RepositoryStateInfo: ...

    def publish_repositories(self, repo_ids: list[str]) -> None: ...

    def drop_repositories(self, repo_ids: list[str]) -> None: ...


StatusProbe = Callable[[str], RepositoryStateInfo]


def advance_state(state: BundleRepositoryState, probe: StatusProbe) -> BundleRepositoryState:
    """Return the next state of a bundle; terminal states are returned as-is."""
    if not state.is_transitioning:
        return state
    return BundleRepositoryState(state.bundle, state.assigned_id, probe(state.assigned_id))


def poll_round(
    states: tuple[BundleRepositoryState, ...], probe: StatusProbe
) -> tuple[BundleRepositoryState, ...]:
    return tuple(advance_state(s, probe) for s in states)


def count_transitioning(states: Iterable[BundleRepositoryState]) -> int:
    return sum(1 for s in states if s.is_transitioning)


def make_summary(states: Iterable[BundleRepositoryState]) -> str:
    """Render one line per bundle, with the diagnostic of failed ones."""
    lines = []
    for s in states:
        line = f" {s.bundle.name} repo:{s.assigned_id}, status: {s.status.name}"
        if s.status is DeploymentState.FAILED:
            line += f" [\n{s.latest_state_info.info}]"
        lines.append(line)
    return "\n".join(lines)


class BundlePublisher:
    """Uploads bundles, waits for them to settle, then drops/keeps/promotes them."""

    def __init__(
        self,
        portal: Portal,
        initial_pause: float,
        loop_pause: float,
        promote_fallback: PromoteFallback = PromoteFallback.KEEP,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.portal = portal
        self.initial_pause = initial_pause
        self.loop_pause = loop_pause
        self.promote_fallback = promote_fallback
        self._sleep = sleep

    def publish(self, bundles: list[Bundle], action: TargetAction) -> PublishingResult:
        initial_states = tuple(self.portal.upload_bundle(b) for b in bundles)
        logger.info("Uploaded bundles:\n%s", make_summary(initial_states))

        final_states = self.wait_for_repositories_to_settle(initial_states)
        logger.info("Processed bundles:\n%s", make_summary(final_states))

        all_valid = all(s.status in VALID_STATES for s in final_states)
        executed = self._execute_action(final_states, action, all_valid)

        logger.info("Done (%s)", executed.value)
        return PublishingResult(
            executed_action=executed,
            all_repos_valid=all_valid,
            final_states=final_states,
        )

    def wait_for_repositories_to_settle(
        self, states: tuple[BundleRepositoryState, ...]
    ) -> tuple[BundleRepositoryState, ...]:
        transitioning = count_transitioning(states)
        if transitioning == 0:
            return states

        logger.info("Waiting for %d repositories to settle...", len(states))
        delay = self.initial_pause * len(states)
        while transitioning > 0:
            logger.info(" waiting %.0fs for Portal processing...", delay)
            self._sleep(delay)

            states = poll_round(states, self.portal.get_deployment_status)

            # Pause for the next round depends on how many are still processing
            transitioning = count_transitioning(states)
            delay = self.loop_pause * transitioning
            logger.info(" (%d bundles still processing)", transitioning)
        return states

    def _execute_action(
        self,
        states: tuple[BundleRepositoryState, ...],
        action: TargetAction,
        all_valid: bool,
    ) -> ExecutedAction:
        repo_ids = [s.assigned_id for s in states]

        if action is TargetAction.PROMOTE_OR_KEEP and all_valid:
            logger.info("Promoting repositories...")
            self.portal.publish_repositories(
                [s.assigned_id for s in states if s.status is DeploymentState.VALIDATED]
            )
            return ExecutedAction.PROMOTED

        if action is TargetAction.PROMOTE_OR_KEEP and self.promote_fallback is PromoteFallback.DROP:
            logger.warning("NOTICE: not all repositories validated successfully!")
            action = TargetAction.DROP

        if action is TargetAction.DROP:
            logger.info("Dropping repositories...")
            self.portal.drop_repositories(repo_ids)
            return ExecutedAction.DROPPED

        logger.info("Keeping repositories")
        if not all_valid:
            logger.warning("NOTICE: not all repositories validated successfully!")
        return ExecutedAction.KEPT
