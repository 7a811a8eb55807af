import os

import pytest

from recut_api.core import config
from recut_api.core.errors import DownloadFailure, ToolUnavailable, TrimCancelled
from recut_api.services.downloader import download_full, download_section, section_spec, ytdlp_base
from recut_api.services.job import TrimJob

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_section_spec_floors_both_ends():
    assert section_spec(10, 20) == "*10-20"
    assert section_spec(10.9, 20.99) == "*10-20"
    assert section_spec(0, 0.5) == "*0-0"


def test_cookies_only_when_file_exists(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "YTDLP_COOKIES", str(tmp_path / "missing.txt"))
    assert "--cookies" not in ytdlp_base()

    cookies = tmp_path / "cookies.txt"
    cookies.write_text("# Netscape HTTP Cookie File\n")
    monkeypatch.setattr(config, "YTDLP_COOKIES", str(cookies))
    base = ytdlp_base()
    assert base[base.index("--cookies") + 1] == str(cookies)


def test_section_download(tools, leftover_files):
    tools.probe().section(data=b"SECTION")

    with TrimJob(runner=tools) as job:
        path = download_section(job, URL, 12.7, 25.2)
        with open(path, "rb") as f:
            assert f.read() == b"SECTION"
        assert os.path.dirname(os.path.dirname(path)) == config.TMP_DIR

    cmd = tools.command("section")
    assert cmd[cmd.index("--download-sections") + 1] == "*12-25"
    assert cmd[cmd.index("-o") + 1] == path
    assert cmd[-2:] == ["--", URL]
    # the job owns the file: gone once it closes
    assert leftover_files() == []


def test_full_download_recodes_to_mp4(tools, leftover_files):
    tools.probe().full()

    with TrimJob(runner=tools) as job:
        path = download_full(job, URL)
        assert os.path.getsize(path) > 0

    cmd = tools.command("full")
    assert cmd[cmd.index("--recode-video") + 1] == "mp4"
    assert cmd[cmd.index("-f") + 1] == "best[ext=mp4]/best"
    assert leftover_files() == []


def test_failure_carries_truncated_stderr(tools, leftover_files, monkeypatch):
    monkeypatch.setattr(config, "STDERR_LIMIT", 20)
    tools.probe().full(ok=False, stderr=b"ERROR: HTTP Error 403: Forbidden while fetching")

    with TrimJob(runner=tools) as job:
        with pytest.raises(DownloadFailure) as exc:
            download_full(job, URL)

    assert exc.value.detail == "ERROR: HTTP Error 40"
    assert leftover_files() == []


def test_zero_exit_without_file_is_failure(tools):
    tools.probe().set("section", exit_code=0)

    with TrimJob(runner=tools) as job:
        with pytest.raises(DownloadFailure):
            download_section(job, URL, 0, 5)


def test_missing_ytdlp(tools):
    tools.probe(ok=False)

    with TrimJob(runner=tools) as job:
        with pytest.raises(ToolUnavailable):
            download_section(job, URL, 0, 5)

    assert tools.stages() == ["probe"]


def test_url_cannot_pose_as_option(tools):
    tools.probe().full()

    with TrimJob(runner=tools) as job:
        download_full(job, "--batch-file=/etc/hosts")

    assert tools.command("full")[-2:] == ["--", "--batch-file=/etc/hosts"]


def _write_stream_parts(cmd, cancel):
    # what a merged bv*+ba download leaves beside -o before failing
    out = cmd[cmd.index("-o") + 1]
    base = out[: -len(".mp4")]
    for name in (base + ".f137.mp4.part", base + ".f140.m4a", out + ".part-Frag3", out + ".ytdl"):
        with open(name, "wb") as f:
            f.write(b"x")


def test_failed_merge_leaves_no_stream_files(tools, leftover_files):
    tools.probe()
    tools.set("section", exit_code=1, stderr=b"ERROR: fragment 4 not found", effect=_write_stream_parts)

    with TrimJob(runner=tools) as job:
        with pytest.raises(DownloadFailure):
            download_section(job, URL, 0, 5)
        assert leftover_files() != []

    assert leftover_files() == []


def test_cancelled_download_leaves_no_stream_files(tools, leftover_files):

    def killed(cmd, cancel):
        _write_stream_parts(cmd, cancel)
        raise TrimCancelled(cmd[0])

    tools.probe().set("section", effect=killed)

    with pytest.raises(TrimCancelled):
        with TrimJob(runner=tools) as job:
            download_section(job, URL, 0, 5)

    assert leftover_files() == []
