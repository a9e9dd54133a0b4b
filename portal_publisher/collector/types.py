"""Types for the bundle collector.

Pom -> BundleSource -> BundleFiles -> Bundle follows the assembly order:
discovery, signing, packaging.
"""

from dataclasses import dataclass, field
from pathlib import Path

POM_SUFFIX = ".pom"
BUNDLE_SUFFIX = "_bundle.jar"


class BundleError(Exception):
    """Raised when bundle sources cannot be found, read or packaged."""


@dataclass(frozen=True)
class Pom:
    """Coordinates read from a POM file."""

    pom_file: Path
    group: str
    artifact: str
    version: str

    @property
    def basename(self) -> str:
        return self.pom_file.name.removesuffix(POM_SUFFIX)

    @property
    def archive_dir(self) -> str:
        """Directory of the bundle entries: group/as/path/artifact/version/"""
        return f"{self.group.replace('.', '/')}/{self.artifact}/{self.version}/"


@dataclass(frozen=True)
class BundleSource:
    """The POM and its companion assets (may be empty)."""

    pom: Pom
    assets: tuple[Path, ...] = ()

    @property
    def files(self) -> list[Path]:
        return [self.pom.pom_file, *self.assets]


@dataclass(frozen=True)
class BundleFiles:
    """The bundle source with one signature per source file, in the same order."""

    bundle_source: BundleSource
    signatures: tuple[Path, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Bundle:
    """A packaged bundle jar and its constituents."""

    bundle_jar: Path
    files: BundleFiles

    @property
    def name(self) -> str:
        return self.bundle_jar.name
