import logging
import threading
import uuid
from contextlib import ExitStack
from typing import Callable, Optional, Sequence, Set

from recut_api.core import config
from recut_api.core.errors import ToolUnavailable
from recut_api.schemas.media import ProcessResult
from recut_api.services.runner import run_external_tool
from recut_api.services.tempfiles import temp_workdir

logger = logging.getLogger(__name__)

Runner = Callable[..., ProcessResult]


class TrimJob:
    """
    Everything one /trim request owns: its id, the cancel flag set when
    the client disconnects, and the temp files it created. Closing the job
    deletes every temp file registered with it.
    """

    def __init__(
        self,
        job_id: Optional[str] = None,
        cancel: Optional[threading.Event] = None,
        runner: Runner = run_external_tool,
    ):
        self.job_id = job_id or str(uuid.uuid4())
        self.cancel = cancel or threading.Event()
        self.runner = runner
        self._stack = ExitStack()
        self._probed: Set[str] = set()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def close(self) -> None:
        self._stack.close()

    def run(self, cmd: Sequence[str]) -> ProcessResult:
        return self.runner(cmd, timeout=config.TOOL_TIMEOUT, cancel=self.cancel)

    def temp_dir(self) -> str:
        """Temp directory that lives, with everything in it, until the job closes."""
        return self._stack.enter_context(temp_workdir(self.job_id))

    def require_tool(self, binary: str) -> None:
        """Probe `binary --version` once per job."""
        if binary in self._probed:
            return
        result = self.run([binary, "--version"])
        if not result.ok:
            logger.error(f"[{self.job_id}] {binary} unavailable (exit {result.exit_code})")
            raise ToolUnavailable(f"{binary} not installed on server")
        self._probed.add(binary)
