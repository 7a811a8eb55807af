from typing import List, Optional

from recut_api.core import config


def truncate(data, limit: Optional[int] = None) -> str:
    """First `limit` bytes of a subprocess stream, decoded for display."""
    if limit is None:
        limit = config.STDERR_LIMIT
    if isinstance(data, str):
        data = data.encode("utf-8", "replace")
    return (data or b"")[:limit].decode("utf-8", "replace").strip()


class TrimError(Exception):
    """Base of every failure the trim pipeline reports to the caller."""

    kind = "InternalError"
    status_code = 500

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.kind)
        self.detail = detail

    def to_body(self) -> dict:
        body = {"error": self.kind}
        if self.detail:
            body["detail"] = self.detail
        return body


class ToolUnavailable(TrimError):
    kind = "ToolUnavailable"


# =========================
# STAGE FAILURES
# =========================
# Non-fatal: the orchestrator moves on to the next strategy.

class StageFailure(TrimError):
    pass


class ResolveFailure(StageFailure):
    kind = "ResolveFailed"


class NoEncodingFound(ResolveFailure):
    pass


class ExtractFailure(StageFailure):
    kind = "ExtractFailed"

    def __init__(self, detail: Optional[str] = None, attempts: Optional[List[str]] = None):
        super().__init__(detail)
        # truncated stderr of each mode tried, in order
        self.attempts = attempts or []


class DownloadFailure(StageFailure):
    kind = "DownloadFailed"


class TrimCancelled(Exception):
    """The client went away; in-flight work was killed."""
