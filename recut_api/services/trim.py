import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from recut_api.core.errors import ResolveFailure, StageFailure, TrimError
from recut_api.schemas.media import ClipOutput, ResolvedSource
from recut_api.services.classifier import classify, is_http
from recut_api.services.downloader import download_full, download_section
from recut_api.services.extractor import clip_filename, extract_with_fallback
from recut_api.services.job import Runner, TrimJob
from recut_api.services.resolver import resolve
from recut_api.services.runner import run_external_tool

logger = logging.getLogger(__name__)


@dataclass
class TrimContext:
    job: TrimJob
    url: str
    start: float
    end: float


Strategy = Callable[[TrimContext], ClipOutput]


# =========================
# STRATEGIES
# =========================

def extract_direct(ctx: TrimContext) -> ClipOutput:
    """Resolve (if needed) and cut straight from the remote URL."""
    if classify(ctx.url).resolvable:
        source = resolve(ctx.job, ctx.url)
    elif is_http(ctx.url):
        source = ResolvedSource.remote(ctx.url)
    else:
        raise ResolveFailure("not an http(s) URL")
    return extract_with_fallback(ctx.job, source, ctx.start, ctx.end)


def section_download(ctx: TrimContext) -> ClipOutput:
    """yt-dlp fetches just the range; the file is already the clip."""
    path = download_section(ctx.job, ctx.url, ctx.start, ctx.end)
    with open(path, "rb") as f:
        data = f.read()
    return ClipOutput(data=data, filename=clip_filename(ctx.start, ctx.end))


def full_download(ctx: TrimContext) -> ClipOutput:
    """Fetch everything locally, then cut."""
    path = download_full(ctx.job, ctx.url)
    return extract_with_fallback(ctx.job, ResolvedSource.local(path), ctx.start, ctx.end)


STRATEGIES: Sequence[Strategy] = (extract_direct, section_download, full_download)


def run_strategies(ctx: TrimContext, strategies: Sequence[Strategy] = STRATEGIES) -> ClipOutput:
    """
    Try each strategy in order and return the first clip produced.

    StageFailure moves on to the next strategy; anything else (missing
    tools, cancellation, bugs) stops the pipeline. When every strategy
    fails, the last failure is raised.
    """
    last: Optional[StageFailure] = None
    for strategy in strategies:
        try:
            clip = strategy(ctx)
        except StageFailure as e:
            logger.warning(f"[{ctx.job.job_id}] {strategy.__name__} failed: {e.kind}")
            last = e
            continue
        logger.info(f"[{ctx.job.job_id}] {strategy.__name__} produced {len(clip)} bytes")
        return clip

    if last is None:
        raise TrimError("no strategy configured")
    raise last


# =========================
# MAIN
# =========================

def trim(
    url: str,
    start: float,
    end: float,
    cancel: Optional[threading.Event] = None,
    runner: Runner = run_external_tool,
) -> ClipOutput:
    """
    Produce an MP4 of url[start:end].

    Blocks until done. Every temp file created along the way is deleted
    before this returns or raises.
    """
    with TrimJob(cancel=cancel, runner=runner) as job:
        logger.info(f"[{job.job_id}] trim {url} {start}-{end}s")
        return run_strategies(TrimContext(job, url, start, end))
