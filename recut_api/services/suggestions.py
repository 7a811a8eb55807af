import re
from typing import List, Optional
from urllib.parse import quote

from recut_api.services.classifier import classify

YOUTUBE_ID = re.compile(r"(?:v=|/)([0-9A-Za-z_-]{11})(?:[&?]|$)")

YOUTUBE_CLIPS = [
    ("c1", "Key insight: Definition", 30, 48),
    ("c2", "Example explained", 210, 235),
    ("c3", "Practical tip", 420, 440),
]

GENERIC_CLIPS = [
    ("c1", "Overview", 10, 28),
    ("c2", "Deep dive", 95, 122),
    ("c3", "Conclusion", 240, 260),
]


def youtube_id(url: str) -> Optional[str]:
    m = YOUTUBE_ID.search(url)
    return m.group(1) if m else None


def placeholder(text: str, w: int = 320, h: int = 180) -> str:
    return f"https://via.placeholder.com/{w}x{h}.png?text={quote(text)}"


def suggest_clips(url: str) -> List[dict]:
    """Canned clip suggestions; no analysis is performed."""
    is_youtube = classify(url).resolvable
    vid = youtube_id(url) if is_youtube else None

    clips = []
    for clip_id, title, start, end in YOUTUBE_CLIPS if is_youtube else GENERIC_CLIPS:
        if vid:
            thumb = f"https://img.youtube.com/vi/{vid}/hqdefault.jpg"
        else:
            thumb = placeholder(title)
        clips.append({
            "id": clip_id,
            "title": title,
            "start": start,
            "end": end,
            "thumbnail": thumb,
        })
    return clips
