import json
import logging
from typing import Dict, Optional

from recut_api.core import config
from recut_api.core.errors import NoEncodingFound, ResolveFailure, truncate
from recut_api.schemas.media import ResolvedSource
from recut_api.services.downloader import ytdlp_base
from recut_api.services.job import TrimJob

logger = logging.getLogger(__name__)


def _has_video(fmt: dict) -> bool:
    return fmt.get("vcodec") not in (None, "none")


def _has_audio(fmt: dict) -> bool:
    return fmt.get("acodec") not in (None, "none")


def _headers(fmt: dict) -> Dict[str, str]:
    headers = fmt.get("http_headers")
    if not isinstance(headers, dict):
        return {}
    return {str(k): str(v) for k, v in headers.items()}


def _entries(info: dict, key: str) -> list:
    """Format dicts under `key` that carry a url; anything else is skipped."""
    value = info.get(key)
    if not isinstance(value, list):
        return []
    return [f for f in value if isinstance(f, dict) and isinstance(f.get("url"), str) and f["url"]]


def _source(fmt: dict, audio: Optional[ResolvedSource] = None) -> ResolvedSource:
    return ResolvedSource.remote(fmt["url"], _headers(fmt), audio)


def select_source(info: dict) -> ResolvedSource:
    """
    Pick a directly fetchable encoding from yt-dlp's metadata.

    Order: the merged video+audio pair yt-dlp chose, the best MP4 single
    stream, the last listed format, the top-level url.
    """
    requested = _entries(info, "requested_formats")
    if len(requested) >= 2:
        video = next((f for f in requested if _has_video(f)), None)
        audio = next((f for f in requested if _has_audio(f) and f is not video), None)
        if video and audio:
            return _source(video, audio=_source(audio))

    formats = _entries(info, "formats")

    # yt-dlp lists formats worst -> best
    mp4 = [f for f in formats if f.get("ext") == "mp4" and _has_video(f)]
    progressive = [f for f in mp4 if _has_audio(f)]
    if progressive:
        return _source(progressive[-1])
    if mp4:
        return _source(mp4[-1])

    if formats:
        return _source(formats[-1])

    if isinstance(info.get("url"), str) and info["url"]:
        return _source(info)

    raise NoEncodingFound("no usable encoding in metadata")


def resolve(job: TrimJob, url: str) -> ResolvedSource:
    """
    Ask yt-dlp for a direct media URL (plus the headers needed to fetch it).

    Raises ToolUnavailable if yt-dlp is missing, ResolveFailure otherwise.
    """
    job.require_tool(config.YTDLP_BINARY)

    result = job.run(ytdlp_base() + ["-J", "--", url])
    if not result.ok:
        raise ResolveFailure(truncate(result.stderr) or f"yt-dlp exited with {result.exit_code}")

    try:
        info = json.loads(result.stdout)
    except ValueError as e:
        logger.warning(f"[{job.job_id}] unreadable yt-dlp metadata: {e}")
        raise NoEncodingFound("metadata was not valid JSON") from e

    if not isinstance(info, dict):
        raise NoEncodingFound("metadata was not an object")

    source = select_source(info)
    logger.info(
        f"[{job.job_id}] resolved {url} "
        f"(headers={len(source.headers)}, separate_audio={source.audio is not None})"
    )
    return source
