"""POM discovery and companion asset matching.

Walks the search directory for *.pom files. For each POM the companion
assets are the files next to it named <pom basename><suffix>, in the
configured suffix order. Files matching no suffix are ignored.
"""

import logging
import os
from pathlib import Path

from portal_publisher.collector.types import POM_SUFFIX, BundleError, BundleSource, Pom
from portal_publisher.extract import XmlExtractor

logger = logging.getLogger(__name__)


def find_bundle_sources(search_dir: Path, companion_suffixes: list[str]) -> list[BundleSource]:
    """Collect bundle sources in and below search_dir."""
    if not search_dir.is_dir():
        raise BundleError(f"Not a directory: {search_dir}")

    poms = [read_pom_metadata(p) for p in _walk_pom_files(search_dir)]
    sources = [_make_bundle_source(pom, companion_suffixes) for pom in poms]

    logger.info(
        "Found %d POM(s) with %d companion asset(s) in %s",
        len(sources),
        sum(len(s.assets) for s in sources),
        search_dir,
    )
    return sources


def read_pom_metadata(pom_file: Path) -> Pom:
    """Read groupId, artifactId and version from a POM file."""
    try:
        pom_xml = pom_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BundleError(f"Failed to read POM data from {pom_file}") from exc

    xex = XmlExtractor(pom_xml)
    return Pom(
        pom_file=pom_file,
        group=xex.get("groupId"),
        artifact=xex.get("artifactId"),
        version=xex.get("version"),
    )


def _walk_pom_files(search_dir: Path) -> list[Path]:
    def _raise(exc: OSError) -> None:
        raise BundleError(f"Failed to search for POM files in {search_dir}") from exc

    pom_files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(search_dir, onerror=_raise):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if name.endswith(POM_SUFFIX) and path.is_file():
                pom_files.append(path)
    return pom_files


def _make_bundle_source(pom: Pom, companion_suffixes: list[str]) -> BundleSource:
    directory = pom.pom_file.parent
    companions = tuple(
        candidate
        for candidate in (directory / f"{pom.basename}{suffix}" for suffix in companion_suffixes)
        if candidate.is_file()
    )
    return BundleSource(pom=pom, assets=companions)
