"""Entry point: collect, sign, upload and settle bundles.

Configuration comes from the environment (see portal_publisher.config).
The exit code is 0 only if every deployment validated, regardless of the
action executed on them.
"""

import sys
from typing import Optional

import structlog
from pydantic import ValidationError

from portal_publisher.collector import BundleCollector
from portal_publisher.config import Settings, get_settings
from portal_publisher.logging_setup import configure_structlog
from portal_publisher.portal import PortalProxy
from portal_publisher.publisher import BundlePublisher, PublishingResult
from portal_publisher.signing import GpgSigner

logger = structlog.get_logger(__name__)


def publish(settings: Settings) -> PublishingResult:
    """Run the full publishing flow for the given settings."""
    with GpgSigner(settings.gpg_certificate) as signer, PortalProxy(
        settings.portal_credentials, base_url=settings.portal_base_url
    ) as proxy:
        signer.load_signing_certificate()

        bundles = BundleCollector(signer).collect_bundles(settings.search_dir, settings.suffixes)
        publisher = BundlePublisher(
            proxy,
            initial_pause=settings.initial_pause,
            loop_pause=settings.loop_pause,
            promote_fallback=settings.promote_fallback,
        )
        return publisher.publish(bundles, settings.target_action)


def run(settings: Optional[Settings] = None) -> int:
    """Run the publisher and return the process exit code."""
    if settings is None:
        try:
            settings = get_settings()
        except ValidationError as exc:
            configure_structlog()
            logger.error("invalid_configuration", errors=exc.errors(include_input=False))
            return 1

    configure_structlog(settings.log_level)
    logger.debug(
        "settings",
        search_dir=str(settings.search_dir),
        companion_suffixes=settings.suffixes,
        target_action=settings.target_action.value,
        log_level=settings.log_level,
    )

    try:
        result = publish(settings)
    except Exception:
        logger.exception("publisher_failed")
        return 1

    logger.info("publishing_result", **result.to_dict())
    return 0 if result.all_repos_valid else 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
