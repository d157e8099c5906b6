"""Content-addressed package identifier resolution.

hpc indexes modules by the build directory of the package
(``<name>-<version>-<hash>``), and the hash changes whenever the build
inputs change. The identifier therefore has to be recomputed on every run
from the .cabal file and the current contents of the hpc directory.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Protocol, Union

from hpc_badge.core.logging import get_logger
from hpc_badge.errors import PackageResolutionError

logger = get_logger(__name__)

_CABAL_NAME = re.compile(r"^\s*name\s*:\s*(\S+)\s*$", re.IGNORECASE | re.MULTILINE)


class PackageIdentifierResolver(Protocol):
    """Anything able to name the current build of the package."""

    def package_identifier(self) -> str: ...


def read_package_name(srcdir: Path) -> str:
    """Name declared by the first ``*.cabal`` file in ``srcdir``."""
    cabal_files = sorted(Path(srcdir).glob("*.cabal"))
    if not cabal_files:
        raise PackageResolutionError(f"No .cabal file found in {srcdir}")

    cabal_file = cabal_files[0]
    if len(cabal_files) > 1:
        logger.warning(
            "Several .cabal files in {}; using {}", srcdir, cabal_file.name
        )

    match = _CABAL_NAME.search(cabal_file.read_text(encoding="utf-8"))
    if match is None:
        raise PackageResolutionError(f"No 'name:' field in {cabal_file}")
    return match.group(1)


def find_package_identifier(package_name: str, hpc_dir: Path) -> str:
    """Pick ``<name>-<version>-<hash>`` out of the hpc directory listing.

    Entries for the test suites and other components (which carry extra
    suffixes) are ignored.
    """
    hpc_dir = Path(hpc_dir)
    if not hpc_dir.is_dir():
        raise PackageResolutionError(f"hpc directory does not exist: {hpc_dir}")

    pattern = re.compile(rf"^{re.escape(package_name)}-[0-9.]+-([0-9A-Za-z]+)$")
    candidates = sorted(
        entry.name for entry in hpc_dir.iterdir() if pattern.match(entry.name)
    )
    if not candidates:
        raise PackageResolutionError(
            f"No build of package '{package_name}' found in {hpc_dir}"
        )
    if len(candidates) > 1:
        logger.warning(
            "Several builds of {} in {}: {}; using {}",
            package_name,
            hpc_dir,
            ", ".join(candidates),
            candidates[-1],
        )
    return candidates[-1]


class StackPackageResolver:
    """Resolve the identifier from the .cabal file and stack's hpc directory.

    ``hpc_dir`` may be a path or a callable returning one, so that the
    directory is looked up (through ``stack path``) only when needed.
    """

    def __init__(self, srcdir: Path, hpc_dir: Union[Path, Callable[[], Path]]):
        self.srcdir = Path(srcdir)
        self._hpc_dir = hpc_dir

    @property
    def hpc_dir(self) -> Path:
        if callable(self._hpc_dir):
            return Path(self._hpc_dir())
        return Path(self._hpc_dir)

    def package_identifier(self) -> str:
        name = read_package_name(self.srcdir)
        identifier = find_package_identifier(name, self.hpc_dir)
        logger.debug("Package identifier for {}: {}", name, identifier)
        return identifier


class FixedPackageResolver:
    """Resolver returning a known identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier

    def package_identifier(self) -> str:
        return self.identifier

