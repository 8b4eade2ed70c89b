"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from vesper import __version__
from vesper.cli import app
from vesper.config import VesperSettings, configure_logging, get_settings, set_settings
from vesper.storage import SQLiteScriptStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """Commands with global options rebind log handlers to the runner streams."""
    yield
    configure_logging(VesperSettings())


@pytest.fixture
def stored_db():
    """Open the configured database after a command has run."""
    stores = []

    def _open():
        store = SQLiteScriptStore(get_settings().database_path).initialize()
        stores.append(store)
        return store

    yield _open
    for store in stores:
        store.close()


def invoke_json(args):
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestParse:
    def test_json_output(self, sample_file):
        data = invoke_json(["parse", str(sample_file), "--json"])
        assert len(data["scenes"]) == 3
        assert data["analysis"]["characters"]["protagonist"] == "MAYA"

    def test_table_output(self, sample_file):
        result = runner.invoke(app, ["parse", str(sample_file)])
        assert result.exit_code == 0
        assert "the_last_shift" in result.output
        assert "MAYA" in result.output

    def test_save(self, sample_file, stored_db):
        result = runner.invoke(
            app,
            [
                "parse",
                str(sample_file),
                "--save",
                "--title",
                "Shift",
                "--genre",
                "Drama",
                "-g",
                "Thriller",
                "--rating",
                "8.1",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Saved as script 1" in result.output

        store = stored_db()
        script = store.get_script(1)
        assert script.title == "Shift"
        assert script.genre_tags == ["Drama", "Thriller"]
        assert script.rating == 8.1
        assert script.processed
        assert store.count_scenes(1) == 3

    def test_invalid_utf8_is_replaced(self, tmp_path, sample_text):
        """Test that stray Latin-1 bytes do not stop a parse."""
        path = tmp_path / "latin1.txt"
        path.write_bytes(sample_text.replace("late", "l\xe0te").encode("latin-1"))

        data = invoke_json(["parse", str(path), "--json"])
        assert len(data["scenes"]) == 3
        assert data["dialogue"][0]["text"] == "You're l\ufffdte again."

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["parse", str(tmp_path / "nope.txt")])
        assert result.exit_code == 1
        assert "Validation Error" in result.output
        assert "File not found" in result.output

    def test_missing_file_json(self, tmp_path):
        result = runner.invoke(app, ["parse", str(tmp_path / "nope.txt"), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["success"] is False
        assert data["error"].startswith("File not found")


class TestImportAndBatch:
    def test_import_then_batch(self, tmp_path, sample_text, stored_db):
        folder = tmp_path / "scripts"
        folder.mkdir()
        for name in ("first.txt", "second.fountain"):
            (folder / name).write_text(sample_text, encoding="utf-8")

        result = runner.invoke(app, ["import", str(folder)])
        assert result.exit_code == 0, result.output
        assert "Imported 2 script(s)" in result.output

        report = invoke_json(["batch", "--delay", "0", "--json"])
        assert report["parsed"] == 2
        assert report["failed"] == 0

        report = invoke_json(["batch", "--delay", "0", "--json"])
        assert report["skipped"] == 2
        assert stored_db().table_counts()["dialogue_lines"] == 10

    def test_import_missing_path(self, tmp_path):
        result = runner.invoke(app, ["import", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Path not found" in result.output


class TestAnalysisCommands:
    def test_patterns_empty_database(self):
        data = invoke_json(["patterns", "--json"])
        assert data == {"successful": 0, "unsuccessful": 0, "patterns": []}

    def test_patterns_after_save(self, sample_file):
        runner.invoke(
            app, ["parse", str(sample_file), "--save", "-g", "Drama", "--rating", "8"]
        )
        data = invoke_json(["patterns", "--json"])
        assert data["successful"] == 1
        names = {p["pattern_name"] for p in data["patterns"]}
        assert "Drama Success Rate" in names

    def test_outline_json(self):
        data = invoke_json(["outline", "A heist goes wrong.", "--genre", "Crime", "--json"])
        assert data["premise"] == "A heist goes wrong."
        assert data["structure"]["totalPages"] == 110

    def test_outline_length(self):
        data = invoke_json(["outline", "x", "-g", "Crime", "-l", "90", "--json"])
        assert data["structure"]["totalPages"] == 90

    def test_outline_text(self):
        result = runner.invoke(app, ["outline", "A heist goes wrong.", "-g", "Crime"])
        assert result.exit_code == 0
        assert "ACT 1: SETUP" in result.output
        assert "Recommendations" in result.output

    def test_outline_blank_premise(self):
        result = runner.invoke(app, ["outline", "  ", "--genre", "Crime"])
        assert result.exit_code == 1
        assert "Premise is required" in result.output

    def test_outline_requires_genre(self):
        result = runner.invoke(app, ["outline", "A heist goes wrong."])
        assert result.exit_code == 2


class TestStatsAndEnrich:
    @pytest.fixture
    def existing_db(self):
        SQLiteScriptStore(get_settings().database_path).initialize().close()

    def test_stats_json(self, existing_db):
        data = invoke_json(["stats", "--json"])
        assert data["stats"]["scripts"] == 0
        assert data["genres"] == []

    def test_stats_table(self, existing_db):
        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 0
        assert "learned_patterns" in result.output

    def test_stats_missing_database(self):
        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 1
        assert "Database not found" in result.output

    def test_enrich_without_api_key(self, tmp_path):
        set_settings(
            VesperSettings(database_path=tmp_path / "enrich.db", tmdb_api_key=None)
        )
        result = runner.invoke(app, ["enrich", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "TMDB API key is not configured"


class TestGlobalOptions:
    def test_config_file(self, tmp_path):
        config = tmp_path / "vesper.yaml"
        config.write_text(f"database_path: {tmp_path / 'other.db'}\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(config), "patterns", "--json"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "other.db").exists()

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(
            app, ["--config", str(tmp_path / "missing.yaml"), "stats"]
        )
        assert result.exit_code == 1
        assert "Failed to load configuration" in result.output

    def test_debug_flag(self):
        result = runner.invoke(app, ["--debug", "patterns"])
        assert result.exit_code == 0
        assert get_settings().debug is True
