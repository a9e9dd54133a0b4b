"""Bundle assembler: signs bundle sources and packs them into jars.

Each bundle jar contains, under group/as/path/artifact/version/:
- the POM and its companion assets
- the .md5 and .sha1 checksum files of each of those
- the .asc signature of each of those

Checksum files are produced by the build; their absence fails the bundle
before any signing is attempted.
"""

import logging
import zipfile
from pathlib import Path
from typing import Protocol

from portal_publisher.collector.discovery import find_bundle_sources
from portal_publisher.collector.types import (
    BUNDLE_SUFFIX,
    Bundle,
    BundleError,
    BundleFiles,
    BundleSource,
)

logger = logging.getLogger(__name__)

CHECKSUM_SUFFIXES = (".md5", ".sha1")


class Signer(Protocol):
    def sign(self, file: Path) -> Path: ...


class BundleCollector:
    """Collects POMs and companion assets from disk into signed bundles."""

    def __init__(self, signer: Signer):
        self.signer = signer

    def collect_bundles(self, search_dir: Path, companion_suffixes: list[str]) -> list[Bundle]:
        """Find, sign and package all bundles below search_dir.

        Checksums of every bundle are checked before the first file is signed.
        """
        sources = find_bundle_sources(search_dir, companion_suffixes)
        checksum_files = [assert_checksum_files(source.files) for source in sources]

        bundles = [
            package_bundle(self.sign_bundle_files(source), checksums)
            for source, checksums in zip(sources, checksum_files)
        ]
        logger.info("Packaged %d bundle(s)", len(bundles))
        return bundles

    def sign_bundle_files(self, bundle_source: BundleSource) -> BundleFiles:
        signatures = tuple(self.signer.sign(f) for f in bundle_source.files)
        return BundleFiles(bundle_source=bundle_source, signatures=signatures)


def assert_checksum_files(files: list[Path]) -> list[Path]:
    """Return the checksum files for files, failing if any is missing."""
    checksum_files = [
        f.parent / (f.name + suffix) for f in files for suffix in CHECKSUM_SUFFIXES
    ]
    missing = [f for f in checksum_files if not f.is_file()]
    if missing:
        raise BundleError(
            f"Did not find required checksum files: {[str(m) for m in missing]}"
        )
    return checksum_files


def package_bundle(bundle_files: BundleFiles, checksum_files: list[Path]) -> Bundle:
    """Write the bundle jar next to the POM file."""
    pom = bundle_files.bundle_source.pom
    bundle_jar = pom.pom_file.parent / f"{pom.basename}{BUNDLE_SUFFIX}"

    all_files = [
        *bundle_files.bundle_source.files,
        *checksum_files,
        *bundle_files.signatures,
    ]

    try:
        with zipfile.ZipFile(bundle_jar, "w", compression=zipfile.ZIP_DEFLATED) as jar:
            for f in all_files:
                jar.write(f, arcname=pom.archive_dir + f.name)
    except OSError as exc:
        raise BundleError(f"Failed to package bundle into {bundle_jar}") from exc

    logger.info("Packaged %s with %d file(s)", bundle_jar.name, len(all_files))
    return Bundle(bundle_jar=bundle_jar, files=bundle_files)
