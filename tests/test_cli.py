"""CLI tests for scanning, previewing and renaming."""

import json
import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner
from PIL import ExifTags, Image

from reshape.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    for key in list(env):
        if key.startswith("RESHAPE__"):
            env[key] = None
    return env


def _photo(path: Path, taken: str) -> Path:
    exif = Image.Exif()
    exif[ExifTags.Base.DateTime] = taken
    Image.new("RGB", (8, 8), color="green").save(path, format="JPEG", exif=exif)
    return path


def _album(tmp_path: Path) -> Path:
    album = tmp_path / "album"
    album.mkdir()
    _photo(album / "a.jpg", "2024:01:15 09:00:00")
    _photo(album / "b.jpg", "2024:01:15 12:00:00")
    _photo(album / "c.jpg", "2024:01:16 08:00:00")
    return album


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Reshape batch-renames" in result.output
    for command in ("list", "preview", "rename", "metadata", "pattern", "config"):
        assert command in result.output


def test_list_json_reports_files(tmp_path: Path) -> None:
    album = _album(tmp_path)
    (album / "notes.txt").write_text("n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(
        cli, ["list", str(album), "--ext", ".jpg", "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["totalCount"] == 3
    assert [entry["name"] for entry in payload["files"]] == ["a.jpg", "b.jpg", "c.jpg"]


def test_list_missing_folder_exits_with_error(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["list", str(tmp_path / "missing"), "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    assert json.loads(result.output)["error"]["code"] == "not_found"


def test_preview_json_vacation_mode(tmp_path: Path) -> None:
    album = _album(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        [
            "preview",
            str(album),
            "--pattern",
            "{filename}_{counter:3}",
            "--vacation",
            "--start-date",
            "2024-01-15",
            "--json",
        ],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [item["newName"] for item in payload["items"]] == [
        "Day 1/a_001.jpg",
        "Day 1/b_002.jpg",
        "Day 2/c_001.jpg",
    ]
    assert payload["conflictCount"] == 0
    assert sorted(path.name for path in album.iterdir()) == ["a.jpg", "b.jpg", "c.jpg"]


def test_preview_without_pattern_is_configuration_error(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["preview", str(tmp_path / "missing"), "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    assert json.loads(result.output)["error"]["code"] == "configuration_error"


def test_preview_uses_configured_default_pattern(tmp_path: Path) -> None:
    album = _album(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["RESHAPE__RENAME__DEFAULT_PATTERN"] = "IMG_{counter:4}"

    result = runner.invoke(cli, ["preview", str(album), "--json"], env=env)

    assert result.exit_code == 0, result.output
    names = [item["newName"] for item in json.loads(result.output)["items"]]
    assert names == ["IMG_0001.jpg", "IMG_0002.jpg", "IMG_0003.jpg"]


def test_rename_yes_moves_files(tmp_path: Path) -> None:
    album = _album(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["rename", str(album), "--pattern", "trip_{counter:2}", "--yes"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    renamed = sorted(path.name for path in album.iterdir())
    assert renamed == ["trip_01.jpg", "trip_02.jpg", "trip_03.jpg"]
    assert "renamed=3" in result.output


def test_rename_dry_run_json_leaves_files(tmp_path: Path) -> None:
    album = _album(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["rename", str(album), "--pattern", "trip_{counter:2}", "--dry-run", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["successCount"] == 3
    assert payload["errorCount"] == 0
    assert sorted(path.name for path in album.iterdir()) == ["a.jpg", "b.jpg", "c.jpg"]


def test_rename_declined_confirmation_keeps_files(tmp_path: Path) -> None:
    album = _album(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["rename", str(album), "--pattern", "trip_{counter:2}"],
        env=_env_with_home(tmp_path),
        input="n\n",
    )

    assert result.exit_code == 0, result.output
    assert "cancelled" in result.output.lower()
    assert sorted(path.name for path in album.iterdir()) == ["a.jpg", "b.jpg", "c.jpg"]


def test_rename_vacation_creates_day_folders(tmp_path: Path) -> None:
    album = _album(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["rename", str(album), "--pattern", "{filename}", "--vacation", "--yes", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert (album / "Day 1" / "a.jpg").exists()
    assert (album / "Day 1" / "b.jpg").exists()
    assert (album / "Day 2" / "c.jpg").exists()


def test_metadata_json(tmp_path: Path) -> None:
    photo = _photo(tmp_path / "shot.jpg", "2024:02:03 04:05:06")
    runner = CliRunner()

    result = runner.invoke(cli, ["metadata", str(photo), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["date_taken"] == "2024-02-03"
    assert payload["filename"] == "shot"


def test_pattern_add_list_remove(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    added = runner.invoke(cli, ["pattern", "add", "{year}_{counter:5}", "-d", "Yearly"], env=env)
    duplicate = runner.invoke(cli, ["pattern", "add", "{YEAR}_{counter:5}"], env=env)
    listed = runner.invoke(cli, ["pattern", "list", "--json"], env=env)
    removed = runner.invoke(cli, ["pattern", "remove", "{year}_{counter:5}"], env=env)
    missing = runner.invoke(cli, ["pattern", "remove", "{year}_{counter:5}"], env=env)

    assert added.exit_code == 0, added.output
    assert duplicate.exit_code == 1
    assert "already exists" in duplicate.output
    patterns = json.loads(listed.output)
    assert patterns[-1] == {"pattern": "{year}_{counter:5}", "description": "Yearly"}
    assert patterns[0]["pattern"] == "{year}-{month}-{day}_{filename}"
    assert removed.exit_code == 0
    assert missing.exit_code == 1
    stored = tmp_path / "home" / ".reshape" / "patterns.json"
    assert json.loads(stored.read_text(encoding="utf-8")) == []
