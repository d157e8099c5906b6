"""Overlay documents: drafting, locating the template, merging with a trace.

An overlay is hpc's directive language for marking source regions as
covered. The draft names modules with their build-specific prefix
(``module "pkg-0.1.0.0-HASH:Data.Foo"``); the template kept in version
control uses bare names, and the prefix of the current build is put back
just before merging.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from hpc_badge.core.logging import get_logger
from hpc_badge.errors import MissingTemplateError
from hpc_badge.package import PackageIdentifierResolver
from hpc_badge.tools import HpcTool

logger = get_logger(__name__)

_MODULE_PREFIX = re.compile(r'module ".*:')
_MODULE_OPEN = 'module "'


def strip_module_prefixes(text: str) -> str:
    """Drop the package prefix from every module declaration.

    Everything between the opening quote and the last colon on the line
    goes, which leaves bare module names.
    """
    return _MODULE_PREFIX.sub(_MODULE_OPEN, text)


def qualify_modules(text: str, identifier: str) -> str:
    """Prefix every module declaration with ``identifier/``."""
    return text.replace(_MODULE_OPEN, f'{_MODULE_OPEN}{identifier}/')


def generate_draft(
    hpc: HpcTool, hpc_dir: Path, srcdir: Path, tix: Path, dest: Path
) -> Path:
    """Write a draft overlay for ``tix`` to ``dest``."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    draft = strip_module_prefixes(hpc.draft(hpc_dir, srcdir, tix))
    dest.write_text(draft, encoding="utf-8")
    logger.debug("Draft overlay written to {}", dest)
    return dest


def resolve_template(path: Path, draft_path: Optional[Path] = None) -> Path:
    """Return the overlay template, failing when it has not been created.

    Raises:
        MissingTemplateError: ``path`` does not exist.
    """
    if not path.is_file():
        raise MissingTemplateError(path, draft_path)
    return path


def merge_overlay(
    hpc: HpcTool,
    resolver: PackageIdentifierResolver,
    template: Path,
    hpc_dir: Path,
    srcdir: Path,
    dest: Path,
) -> Path:
    """Apply ``template`` to the current build and write the tix to ``dest``.

    The template is rewritten with the current package identifier into a
    temporary file, which is always removed afterwards.
    """
    identifier = resolver.package_identifier()
    qualified = qualify_modules(template.read_text(encoding="utf-8"), identifier)

    fd, tmp_name = tempfile.mkstemp(suffix=".overlay", prefix="hpc-badge-")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(qualified)
        tix = hpc.overlay(hpc_dir, srcdir, tmp_path)
    finally:
        tmp_path.unlink(missing_ok=True)

    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(tix, encoding="utf-8")
    logger.debug("Overlay for {} written to {}", identifier, dest)
    return dest
