from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class SourceKind(str, Enum):
    LOCAL_FILE = "local_file"
    REMOTE_URL = "remote_url"


@dataclass(frozen=True)
class ResolvedSource:
    """
    An input the transcoder can read directly.

    `headers` must be sent with every request for a remote location.
    `audio` is set when the platform serves video and audio as separate
    streams; it is fed to the transcoder as a second input.
    """
    kind: SourceKind
    location: str
    headers: Dict[str, str] = field(default_factory=dict)
    audio: Optional["ResolvedSource"] = None

    @classmethod
    def remote(cls, url: str, headers: Optional[Dict[str, str]] = None, audio=None):
        return cls(SourceKind.REMOTE_URL, url, dict(headers or {}), audio)

    @classmethod
    def local(cls, path: str):
        return cls(SourceKind.LOCAL_FILE, str(path))


@dataclass(frozen=True)
class ClipOutput:
    data: bytes
    filename: str
    mime_type: str = "video/mp4"

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
