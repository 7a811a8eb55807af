import logging
import os
import shutil
import tempfile
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from recut_api.core import config

logger = logging.getLogger(__name__)


def temp_path(owner: str, suffix: str = ".mp4", directory: Optional[str] = None) -> str:
    """Randomized file name in the shared temp dir; nothing is created."""
    base = directory or config.TMP_DIR
    name = f"recut_{owner[:8]}_{uuid.uuid4().hex[:12]}{suffix}"
    return os.path.join(base, name)


def discard(path: str) -> None:
    """Best-effort delete."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temp file {path}: {e}")


@contextmanager
def temp_artifact(owner: str, suffix: str = ".mp4") -> Iterator[str]:
    """
    Reserve a temp path for a subprocess to write to.

    The file (and any `.part` left behind by the downloader) is removed
    when the block exits, however it exits.
    """
    path = temp_path(owner, suffix)
    try:
        yield path
    finally:
        discard(path)
        discard(path + ".part")


@contextmanager
def temp_workdir(owner: str) -> Iterator[str]:
    """
    Private directory for a tool that writes more than its output file.

    yt-dlp leaves per-format streams, `.part-Frag*` and `.ytdl` files next
    to `-o`; the whole directory goes when the block exits.
    """
    path = tempfile.mkdtemp(prefix=f"recut_{owner[:8]}_", dir=config.TMP_DIR)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
