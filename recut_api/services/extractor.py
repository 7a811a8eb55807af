import logging
import os
from enum import Enum
from typing import List

from recut_api.core import config
from recut_api.core.errors import ExtractFailure, truncate
from recut_api.schemas.media import ClipOutput, ResolvedSource, SourceKind
from recut_api.services.job import TrimJob
from recut_api.services.tempfiles import temp_artifact

logger = logging.getLogger(__name__)


class ExtractMode(str, Enum):
    COPY = "copy"
    ENCODE = "encode"


def clip_duration(start: float, end: float) -> float:
    return max(config.MIN_CLIP_DURATION, end - start)


def clip_filename(start: float, end: float) -> str:
    return f"clip_{int(start)}_{int(end)}.mp4"


def header_blob(headers: dict) -> str:
    # ffmpeg wants CRLF-terminated "Key: Value" lines
    return "".join(f"{k}: {v}\r\n" for k, v in headers.items())


def _input_args(source: ResolvedSource, start: float) -> List[str]:
    args = ["-ss", str(start)]
    if source.kind == SourceKind.REMOTE_URL and source.headers:
        args += ["-headers", header_blob(source.headers)]
    return args + ["-i", source.location]


def build_command(source: ResolvedSource, start: float, end: float, mode: ExtractMode, out: str) -> List[str]:
    cmd = [config.FFMPEG_BINARY, "-y", "-hide_banner", "-loglevel", "error"]
    cmd += _input_args(source, start)
    if source.audio is not None:
        cmd += _input_args(source.audio, start)
        cmd += ["-map", "0:v:0", "-map", "1:a:0"]

    cmd += ["-t", str(clip_duration(start, end))]

    if mode == ExtractMode.COPY:
        cmd += ["-c", "copy"]
    else:
        cmd += [
            "-c:v", config.VIDEO_CODEC,
            "-preset", config.ENCODE_PRESET,
            "-c:a", config.AUDIO_CODEC,
        ]

    # fragmented output stays playable even if ffmpeg stops early
    cmd += ["-movflags", "frag_keyframe+empty_moov", "-f", "mp4", out]
    return cmd


def extract(job: TrimJob, source: ResolvedSource, start: float, end: float, mode: ExtractMode) -> ClipOutput:
    """Cut [start, end] out of `source` in a single ffmpeg pass."""
    with temp_artifact(job.job_id, ".mp4") as out:
        result = job.run(build_command(source, start, end, mode, out))

        if result.ok and os.path.exists(out):
            with open(out, "rb") as f:
                data = f.read()
            logger.info(f"[{job.job_id}] {mode.value} extract ok ({len(data)} bytes)")
            return ClipOutput(data=data, filename=clip_filename(start, end))

        detail = truncate(result.stderr) or f"ffmpeg exited with {result.exit_code}"
        logger.warning(f"[{job.job_id}] {mode.value} extract failed: {detail}")
        raise ExtractFailure(detail, attempts=[detail])


def extract_with_fallback(job: TrimJob, source: ResolvedSource, start: float, end: float) -> ClipOutput:
    """Stream copy first; on failure, exactly one re-encode with the same input."""
    attempts = []
    detail = None
    for mode in (ExtractMode.COPY, ExtractMode.ENCODE):
        try:
            return extract(job, source, start, end, mode)
        except ExtractFailure as e:
            detail = e.detail
            attempts.append(f"{mode.value}: {e.detail}")

    raise ExtractFailure(detail, attempts=attempts)
