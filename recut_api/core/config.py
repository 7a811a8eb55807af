import os
import shutil
import tempfile

# =========================
# PATHS
# =========================
TMP_DIR = os.getenv("RECUT_TMP_DIR", tempfile.gettempdir())

os.makedirs(TMP_DIR, exist_ok=True)

# =========================
# EXTERNAL TOOLS
# =========================
YTDLP_BINARY = os.getenv("YTDLP_BINARY", shutil.which("yt-dlp") or "yt-dlp")
FFMPEG_BINARY = os.getenv("FFMPEG_BINARY", shutil.which("ffmpeg") or "ffmpeg")

# optional cookies.txt for platforms that gate playback
YTDLP_COOKIES = os.getenv("YTDLP_COOKIES")

TOOL_TIMEOUT = float(os.getenv("TOOL_TIMEOUT", "120"))
STDERR_LIMIT = int(os.getenv("STDERR_LIMIT", "400"))

# =========================
# TRIM
# =========================
MIN_CLIP_DURATION = float(os.getenv("MIN_CLIP_DURATION", "0.1"))

VIDEO_CODEC = os.getenv("VIDEO_CODEC", "libx264")
AUDIO_CODEC = os.getenv("AUDIO_CODEC", "aac")
ENCODE_PRESET = os.getenv("ENCODE_PRESET", "veryfast")

RESOLVABLE_HOSTS = tuple(
    h.strip().lower()
    for h in os.getenv("RESOLVABLE_HOSTS", "youtube.com,youtu.be").split(",")
    if h.strip()
)

# =========================
# SERVER
# =========================
# 0 = no cap
MAX_CONCURRENT_TRIMS = int(os.getenv("MAX_CONCURRENT_TRIMS", "0"))
DISCONNECT_POLL_INTERVAL = float(os.getenv("DISCONNECT_POLL_INTERVAL", "0.5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
