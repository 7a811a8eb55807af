from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urlparse

from recut_api.core import config


@dataclass(frozen=True)
class Classification:
    resolvable: bool


def _hostname(url: str) -> str:
    url = url.strip()
    if "://" not in url:
        # "youtu.be/abc" pasted without a scheme
        url = "//" + url
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def classify(url: str, hosts: Optional[Iterable[str]] = None) -> Classification:
    """Is `url` on a streaming platform that needs yt-dlp to resolve it?"""
    host = _hostname(url)
    if not host:
        return Classification(resolvable=False)

    for known in hosts if hosts is not None else config.RESOLVABLE_HOSTS:
        if host == known or host.endswith("." + known):
            return Classification(resolvable=True)
    return Classification(resolvable=False)


def is_http(url: str) -> bool:
    """Only http(s) links are handed to ffmpeg as-is; never local paths."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)
