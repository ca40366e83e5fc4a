"""Tests for the episode-csv command line, run in-process against temp files."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import json

import pytest

from episode_csv.cli import build_parser, main

EXPORT = "\n".join(
    [
        "episode_number,name,air_date,runtime,overview,backdrop",
        "1,Pilot,2024-01-01,45,The beginning,b1.jpg",
        "2,Second,2024-01-08,44,More,b2.jpg",
        "3,Third,2024-01-15,43,The end,b3.jpg",
    ]
)


@pytest.fixture
def export_file(tmp_path):
    path = tmp_path / "export.csv"
    path.write_text(EXPORT, encoding="utf-8")
    return path


def run(capsys, argv: list[str]) -> tuple[int, dict]:
    code = main(argv)
    return code, json.loads(capsys.readouterr().out)


class TestProcessCommand:

    def test_delete(self, capsys, export_file):
        code, payload = run(capsys, ["process", str(export_file), "--episodes", "1", "3"])
        assert code == 0
        assert payload["success"] is True
        assert payload["removed_episode_numbers"] == [1, 3]
        assert payload["remaining_row_count"] == 1
        assert payload["original_row_count"] == 3
        assert export_file.read_text(encoding="utf-8").split("\n")[1].startswith("2,Second")
        assert payload["backup_path"] == str(export_file) + ".bak"

    def test_keep_mode(self, capsys, export_file):
        code, payload = run(capsys, ["process", str(export_file), "--episodes", "2", "--mode", "keep", "--no-backup"])
        assert code == 0
        assert payload["removed_episode_numbers"] == [1, 3]
        assert payload["backup_path"] is None

    def test_dry_run_leaves_file(self, capsys, export_file):
        code, payload = run(capsys, ["process", str(export_file), "--episodes", "1", "--dry-run"])
        assert code == 0
        assert payload["dry_run"] is True
        assert payload["removed_count"] == 1
        assert export_file.read_text(encoding="utf-8") == EXPORT

    def test_youku_offset(self, capsys, export_file):
        argv = ["process", str(export_file), "--episodes", "2", "3", "--platform-url", "https://v.youku.com/x", "--dry-run"]
        _, payload = run(capsys, argv)
        assert payload["removed_episode_numbers"] == [1, 2]

    def test_remove_columns(self, capsys, export_file):
        argv = ["process", str(export_file), "--episodes", "9", "--remove-column", "air_date", "--remove-column", "backdrop"]
        _, payload = run(capsys, argv)
        assert payload["removed_columns"] == ["air_date", "backdrop"]
        assert export_file.read_text(encoding="utf-8").split("\n")[0] == "episode_number,name,runtime,overview"

    def test_missing_episode_column(self, capsys, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("title,air_date\nPilot,2024-01-01", encoding="utf-8")
        code, payload = run(capsys, ["process", str(path), "--episodes", "1"])
        assert code == 1
        assert payload["success"] is False
        assert payload["headers"] == ["title", "air_date"]
        assert "episode_number" in payload["searched_columns"]
        assert path.read_text(encoding="utf-8") == "title,air_date\nPilot,2024-01-01"

    def test_missing_file(self, capsys, tmp_path):
        code, payload = run(capsys, ["process", str(tmp_path / "nope.csv"), "--episodes", "1"])
        assert code == 1
        assert payload["success"] is False


class TestAnalyzeCommand:

    def test_inventory(self, capsys, export_file):
        code, payload = run(capsys, ["analyze", str(export_file)])
        assert code == 0
        assert payload["remaining_episodes"] == [1, 2, 3]
        assert payload["episode_range"] == {"min": 1, "max": 3, "count": 3}
        assert payload["episode_column_name"] == "episode_number"
        assert payload["parse_errors"] == 0


class TestRepairCommand:

    def test_repair_to_output(self, capsys, tmp_path):
        source = tmp_path / "broken.csv"
        source.write_text("a,b,c\n1,x\ny,z\n2,p,q", encoding="utf-8")
        target = tmp_path / "fixed.csv"
        code, payload = run(capsys, ["repair", str(source), "--output", str(target)])
        assert code == 0
        assert payload["rows"] == 2
        assert payload["merged_rows"] == 1
        assert payload["residual_mismatches"] == 0
        assert target.read_text(encoding="utf-8") == "a,b,c\n1,x y,z\n2,p,q"


class TestParser:

    def test_episodes_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["process", "export.csv"])

    def test_rejects_unknown_column(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["process", "export.csv", "--episodes", "1", "--remove-column", "name"])
