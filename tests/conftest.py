# File: tests/conftest.py

import json
import os

import pytest

from recut_api.core import config
from recut_api.core.errors import TrimCancelled
from recut_api.schemas.media import ProcessResult


def stage_of(cmd):
    """Names the pipeline step a tool command line belongs to."""
    if "--version" in cmd:
        return "probe"
    if "-J" in cmd:
        return "metadata"
    if "--download-sections" in cmd:
        return "section"
    if "--recode-video" in cmd:
        return "full"
    if "-c" in cmd and cmd[cmd.index("-c") + 1] == "copy":
        return "copy"
    if "-c:v" in cmd:
        return "encode"
    return "unknown"


def output_of(cmd):
    if "-o" in cmd:
        return cmd[cmd.index("-o") + 1]
    return cmd[-1]


class FakeTools:
    """
    Scripted stand-in for run_external_tool.

    Each stage gets a canned exit code; a successful stage writes `data`
    to the output path the real tool would have written. Any stage that
    was not scripted fails the test.
    """

    def __init__(self):
        self.calls = []
        self.script = {}

    def set(self, stage, exit_code=0, stdout=b"", stderr=b"", data=None, effect=None):
        self.script[stage] = dict(
            exit_code=exit_code, stdout=stdout, stderr=stderr, data=data, effect=effect
        )
        return self

    # --- shortcuts ---
    def probe(self, ok=True):
        return self.set("probe", 0 if ok else 1, stdout=b"2024.08.06\n")

    def metadata(self, info=None, raw=None, exit_code=0, stderr=b""):
        stdout = raw if raw is not None else json.dumps(info or {}).encode()
        return self.set("metadata", exit_code, stdout=stdout, stderr=stderr)

    def copy(self, ok=True, data=b"COPY-MP4", stderr=b"copy failed: non-keyframe cut"):
        return self.set("copy", 0 if ok else 1, stderr=b"" if ok else stderr, data=data if ok else None)

    def encode(self, ok=True, data=b"ENCODE-MP4", stderr=b"encode failed"):
        return self.set("encode", 0 if ok else 1, stderr=b"" if ok else stderr, data=data if ok else None)

    def section(self, ok=True, data=b"SECTION-MP4", stderr=b"ERROR: section unavailable"):
        return self.set("section", 0 if ok else 1, stderr=b"" if ok else stderr, data=data if ok else None)

    def full(self, ok=True, data=b"FULL-MP4", stderr=b"ERROR: HTTP Error 403: Forbidden"):
        return self.set("full", 0 if ok else 1, stderr=b"" if ok else stderr, data=data if ok else None)

    # --- inspection ---
    def stages(self):
        return [stage for stage, _ in self.calls]

    def count(self, stage):
        return self.stages().count(stage)

    def command(self, stage):
        return next(cmd for s, cmd in self.calls if s == stage)

    def __call__(self, cmd, timeout=None, cancel=None):
        cmd = list(cmd)
        stage = stage_of(cmd)
        self.calls.append((stage, cmd))

        if cancel is not None and cancel.is_set():
            raise TrimCancelled(cmd[0])
        assert stage in self.script, f"unexpected tool call: {stage} {cmd}"

        step = self.script[stage]
        if step["effect"]:
            step["effect"](cmd, cancel)
        if step["data"] is not None:
            with open(output_of(cmd), "wb") as f:
                f.write(step["data"])
        return ProcessResult(step["exit_code"], step["stdout"], step["stderr"])


@pytest.fixture
def tools():
    return FakeTools()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Points temp files at a fresh directory and pins tool names."""
    tmp_dir = tmp_path / "recut_tmp"
    tmp_dir.mkdir()
    monkeypatch.setattr(config, "TMP_DIR", str(tmp_dir))
    monkeypatch.setattr(config, "YTDLP_BINARY", "yt-dlp")
    monkeypatch.setattr(config, "FFMPEG_BINARY", "ffmpeg")
    monkeypatch.setattr(config, "YTDLP_COOKIES", None)
    monkeypatch.setattr(config, "MAX_CONCURRENT_TRIMS", 0)
    yield tmp_dir


@pytest.fixture
def leftover_files(isolated_config):
    """Callable listing whatever is still in the temp dir."""
    return lambda: sorted(os.listdir(isolated_config))
