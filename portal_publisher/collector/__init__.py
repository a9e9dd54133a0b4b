"""Collector module: POM discovery and bundle packaging.

Public API:
    find_bundle_sources(search_dir, companion_suffixes) -> list[BundleSource]
    BundleCollector(signer).collect_bundles(search_dir, companion_suffixes) -> list[Bundle]
"""

from portal_publisher.collector.bundler import BundleCollector
from portal_publisher.collector.discovery import find_bundle_sources, read_pom_metadata
from portal_publisher.collector.types import Bundle, BundleError, BundleFiles, BundleSource, Pom

__all__ = [
    "Bundle",
    "BundleCollector",
    "BundleError",
    "BundleFiles",
    "BundleSource",
    "Pom",
    "find_bundle_sources",
    "read_pom_metadata",
]
