import logging
import os
import signal
import subprocess
import threading
import time
from typing import Optional, Sequence

from recut_api.core import config
from recut_api.core.errors import TrimCancelled
from recut_api.schemas.media import ProcessResult

logger = logging.getLogger(__name__)

# shell convention for "command not found"
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124

POLL_INTERVAL = 0.2


def _redact(cmd: Sequence[str]) -> str:
    # -headers / --add-header values can carry auth tokens
    out = []
    hide_next = False
    for arg in cmd:
        if hide_next:
            out.append("<redacted>")
            hide_next = False
            continue
        out.append(arg)
        if arg in ("-headers", "--add-header", "--cookies"):
            hide_next = True
    return " ".join(out)


def run_external_tool(
    cmd: Sequence[str],
    timeout: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> ProcessResult:
    """
    Run a tool to completion and capture its output.

    Never raises on a failing tool: a missing binary or a timeout comes
    back as a non-zero exit code. Raises TrimCancelled (after killing the
    child) when `cancel` is set.
    """
    if timeout is None:
        timeout = config.TOOL_TIMEOUT

    logger.info(f"Executing: {_redact(cmd)}")

    try:
        proc = subprocess.Popen(
            list(cmd),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            # own process group, so yt-dlp's ffmpeg children die with it
            start_new_session=True,
        )
    except (FileNotFoundError, PermissionError) as e:
        logger.error(f"Cannot start {cmd[0]}: {e}")
        return ProcessResult(EXIT_NOT_FOUND, b"", str(e).encode())

    deadline = time.monotonic() + timeout
    while True:
        if cancel is not None and cancel.is_set():
            _kill(proc)
            logger.warning(f"Cancelled: {cmd[0]}")
            raise TrimCancelled(cmd[0])

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            _kill(proc)
            logger.error(f"{cmd[0]} timed out after {timeout}s")
            return ProcessResult(
                EXIT_TIMEOUT, b"", f"timed out after {timeout}s".encode()
            )

        try:
            stdout, stderr = proc.communicate(timeout=min(POLL_INTERVAL, remaining))
        except subprocess.TimeoutExpired:
            continue

        if proc.returncode != 0:
            logger.warning(f"{cmd[0]} exited with {proc.returncode}")
        return ProcessResult(proc.returncode, stdout or b"", stderr or b"")


def _kill(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (AttributeError, ProcessLookupError, PermissionError):
        proc.kill()
    # reap so the child does not linger as a zombie
    proc.communicate()
