import logging
import math
import os

from recut_api.core import config
from recut_api.core.errors import DownloadFailure, truncate
from recut_api.services.job import TrimJob

logger = logging.getLogger(__name__)


def ytdlp_base() -> list:
    cmd = [config.YTDLP_BINARY, "--no-playlist", "--force-ipv4"]
    if config.YTDLP_COOKIES and os.path.exists(config.YTDLP_COOKIES):
        cmd += ["--cookies", config.YTDLP_COOKIES]
    return cmd


def section_spec(start: float, end: float) -> str:
    return f"*{math.floor(start)}-{math.floor(end)}"


def _fetch(job: TrimJob, args: list, url: str, what: str) -> str:
    job.require_tool(config.YTDLP_BINARY)

    # yt-dlp writes side files next to the output; keep them all in one place
    out = os.path.join(job.temp_dir(), "download.mp4")
    # "--": a url starting with "-" must not be read as an option
    result = job.run(ytdlp_base() + args + ["-o", out, "--", url])

    if not result.ok:
        logger.warning(f"[{job.job_id}] {what} download failed (exit {result.exit_code})")
        raise DownloadFailure(truncate(result.stderr) or f"yt-dlp exited with {result.exit_code}")

    if not os.path.exists(out) or os.path.getsize(out) == 0:
        logger.warning(f"[{job.job_id}] {what} download produced no file")
        raise DownloadFailure("yt-dlp produced no output")

    logger.info(f"[{job.job_id}] {what} download ok ({os.path.getsize(out)} bytes)")
    return out


def download_section(job: TrimJob, url: str, start: float, end: float) -> str:
    """Fetch only [floor(start), floor(end)] of `url` into a local MP4."""
    return _fetch(
        job,
        [
            "-f", "bv*+ba/b",
            "--download-sections", section_spec(start, end),
            "--merge-output-format", "mp4",
        ],
        url,
        "section",
    )


def download_full(job: TrimJob, url: str) -> str:
    """Fetch the whole asset, recoded to MP4."""
    return _fetch(
        job,
        [
            "-f", "best[ext=mp4]/best",
            "--recode-video", "mp4",
        ],
        url,
        "full",
    )
