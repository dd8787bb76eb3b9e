"""
Staging - Filesystem side effects of a plan.

Kept apart from the compilers so argument construction stays pure:
- write_manifest: stage a text file an invocation reads
- relocate: move a produced file to the caller's requested path
- temp_artifacts: scoped ownership of request temp files
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import StagingError

logger = logging.getLogger(__name__)


def write_manifest(path: Path, content: str) -> None:
    """Write a staged text file, creating its directory."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise StagingError(f"Failed to write {path}: {e}", path) from e
    logger.debug(f"Staged {path}")


def relocate(source: Path, destination: Path) -> None:
    """
    Move a file, falling back to copy-then-delete.

    Rename fails across filesystems and on some platforms when the
    destination exists; copying the content still produces the output.
    """
    try:
        os.replace(source, destination)
        return
    except OSError as e:
        logger.debug(f"Rename {source} -> {destination} failed ({e}), copying instead")

    try:
        shutil.copyfile(source, destination)
        source.unlink()
    except OSError as e:
        raise StagingError(f"Failed to save {destination}: {e}", destination) from e


def remove_quietly(path: Path) -> None:
    """Best-effort removal; failures are logged, never raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to remove temp artifact {path}: {e}")


@contextmanager
def temp_artifacts(paths: Iterable[Path]) -> Iterator[list[Path]]:
    """
    Own a request's temp artifacts for the duration of the block.

    Every path is removed on exit, whether the block succeeded, reported a
    tool failure or raised.
    """
    owned = list(paths)
    try:
        yield owned
    finally:
        for path in owned:
            remove_quietly(path)
