from __future__ import annotations

import json

import pytest

from swiftread import cli
from swiftread.analytics import UsageLog
from swiftread.config import Settings


@pytest.fixture
def cli_settings(tmp_path, monkeypatch):
    settings = Settings(analytics_path=tmp_path / "analytics.json", default_wpm=1000)
    monkeypatch.setattr(cli.Settings, "from_env", classmethod(lambda cls: settings))
    return settings


def test_stats_prints_summary(cli_settings, capsys):
    UsageLog(cli_settings.analytics_path).record(42, 300, user_id="u")
    assert cli.main(["stats"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["total_texts_read"] == 1
    assert "sessions" not in data


def test_stats_with_sessions(cli_settings, capsys):
    assert cli.main(["stats", "--sessions"]) == 0
    assert json.loads(capsys.readouterr().out)["sessions"] == []


def test_read_missing_file(cli_settings, tmp_path, capsys):
    assert cli.main(["read", str(tmp_path / "nope.txt")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_read_unsupported_file(cli_settings, tmp_path, capsys):
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3")
    assert cli.main(["read", str(path)]) == 1
    assert "Unsupported file type" in capsys.readouterr().err


def test_read_blank_file(cli_settings, tmp_path, capsys):
    path = tmp_path / "blank.txt"
    path.write_text("   ", encoding="utf-8")
    assert cli.main(["read", str(path), "--no-log"]) == 1
    assert "No readable text" in capsys.readouterr().err


def test_read_plays_file_and_records(cli_settings, tmp_path):
    path = tmp_path / "short.txt"
    path.write_text("one two three four five six", encoding="utf-8")
    assert cli.main(["read", str(path), "--wpm", "1000", "--mode", "center"]) == 0

    sessions = UsageLog(cli_settings.analytics_path).sessions()
    assert len(sessions) == 1
    assert sessions[0].word_count == 6
    assert sessions[0].wpm == 1000


def test_read_without_logging(cli_settings, tmp_path):
    path = tmp_path / "short.txt"
    path.write_text("one two three four five six", encoding="utf-8")
    assert cli.main(["read", str(path), "--wpm", "5000", "--no-log"]) == 0
    assert UsageLog(cli_settings.analytics_path).sessions() == []


def test_rejects_unknown_mode(cli_settings):
    with pytest.raises(SystemExit):
        cli.main(["read", "x.txt", "--mode", "sideways"])


def test_load_source_allows_local_urls(cli_settings, monkeypatch):
    seen = {}

    def fake(url, **kwargs):
        seen.update(kwargs, url=url)
        return "local page text"

    monkeypatch.setattr(cli, "fetch_text_from_url", fake)
    assert cli.load_source("http://localhost:8000/notes", cli_settings) == "local page text"
    assert seen["allow_private"] is True
    assert seen["url"] == "http://localhost:8000/notes"
