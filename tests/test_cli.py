"""test suite for the command line interface."""
import pytest
from unittest.mock import patch
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typer.testing import CliRunner

from mkwlog import config
from mkwlog.cli.main import app
from mkwlog.cli.store import get_record_store
from mkwlog.domain.errors import StorageError
from mkwlog.storage.kv import FileKeyValueStore
from mkwlog.sync.csv_codec import COLUMNS

HEADER = ",".join(COLUMNS)

runner = CliRunner()


class TestCli:
    @pytest.fixture(autouse=True)
    def config_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "CONFIG_DIR", tmp_path)
        monkeypatch.setattr(config, "CONFIG_FILE", tmp_path / "config")
        return tmp_path

    @pytest.fixture
    def profile_id(self):
        result = runner.invoke(app, ["profile", "add", "Mario", "Default", "Standard Kart"])
        assert result.exit_code == 0, result.output
        return config.get_active_profile_id()

    def test_profile_add_selects(self, profile_id):
        assert profile_id
        assert get_record_store().profiles.active_id == profile_id

    def test_profile_add_rejects_placeholder(self):
        result = runner.invoke(app, ["profile", "add", "Select a character", "Default", "Standard Kart"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_add_reports_personal_best(self, profile_id):
        result = runner.invoke(app, ["add", "1:32.456", "DK Pass"])
        assert result.exit_code == 0, result.output
        assert "personal best" in result.output
        result = runner.invoke(app, ["add", "1:40.000", "DK Pass"])
        assert result.exit_code == 0
        assert "personal best" not in result.output

    def test_add_accepts_raw_digits(self, profile_id):
        result = runner.invoke(app, ["add", "132456", "DK Pass"])
        assert result.exit_code == 0, result.output
        assert get_record_store().ledger[0].time == "1:32.456"

    def test_add_rejects_bad_time(self, profile_id):
        result = runner.invoke(app, ["add", "1:75.000", "DK Pass"])
        assert result.exit_code == 1
        assert len(get_record_store().ledger) == 0

    def test_add_without_profile(self):
        result = runner.invoke(app, ["add", "1:32.456", "DK Pass"])
        assert result.exit_code == 1
        assert "No profile selected" in result.output

    def test_list_and_delete(self, profile_id):
        runner.invoke(app, ["add", "1:32.456", "DK Pass"])
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "1:32.456" in result.output
        result = runner.invoke(app, ["delete", "0"])
        assert result.exit_code == 0
        assert len(get_record_store().ledger) == 0

    def test_profile_remove_clears_active(self, profile_id):
        runner.invoke(app, ["add", "1:32.456", "DK Pass"])
        result = runner.invoke(app, ["profile", "remove", profile_id])
        assert result.exit_code == 0
        assert config.get_active_profile_id() is None
        assert len(get_record_store().ledger) == 1

    def test_export_and_import(self, profile_id, tmp_path):
        runner.invoke(app, ["add", "1:32.456", "DK Pass"])
        out = tmp_path / "times.csv"
        result = runner.invoke(app, ["export", str(out)])
        assert result.exit_code == 0
        assert out.read_text().startswith(HEADER)

        result = runner.invoke(app, ["import", str(out), "--mode", "append"])
        assert result.exit_code == 0, result.output
        assert len(get_record_store().ledger) == 2

    def test_import_prompt_cancel(self, profile_id, tmp_path):
        source = tmp_path / "in.csv"
        source.write_text(f"{HEADER}\nd,A,Mario,Default,Standard Kart,1:00.000")
        result = runner.invoke(app, ["import", str(source)], input="cancel\n")
        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert len(get_record_store().ledger) == 0

    def test_import_prompt_replace(self, profile_id, tmp_path):
        runner.invoke(app, ["add", "1:32.456", "DK Pass"])
        source = tmp_path / "in.csv"
        source.write_text(f"{HEADER}\nd,A,Mario,Default,Standard Kart,1:00.000\nbad row")
        result = runner.invoke(app, ["import", str(source)], input="replace\n")
        assert result.exit_code == 0, result.output
        assert "Skipped rows: 1" in result.output
        assert [e.circuit for e in get_record_store().ledger.entries] == ["A"]

    def test_import_bad_header(self, tmp_path):
        source = tmp_path / "in.csv"
        source.write_text("time_of_entry,track\nd,A")
        result = runner.invoke(app, ["import", str(source), "--mode", "replace"])
        assert result.exit_code == 1
        assert "Invalid CSV" in result.output

    def test_reset(self, profile_id):
        runner.invoke(app, ["add", "1:32.456", "DK Pass"])
        result = runner.invoke(app, ["reset", "--yes"])
        assert result.exit_code == 0
        store = get_record_store()
        assert len(store.ledger) == 0
        assert store.profiles.profiles == []

    def test_mask(self):
        result = runner.invoke(app, ["mask", "132456"])
        assert result.output.strip() == "1:32.456"

    def test_dates_preference(self):
        result = runner.invoke(app, ["dates", "absolute"])
        assert result.exit_code == 0
        assert get_record_store().relative_dates is False
        result = runner.invoke(app, ["dates", "sideways"])
        assert result.exit_code == 1

    def test_add_seven_digits(self, profile_id):
        result = runner.invoke(app, ["add", "1032456", "DK Pass"])
        assert result.exit_code == 0, result.output
        assert get_record_store().ledger[0].time == "10:32.456"

    def test_import_undecodable_file(self, profile_id, tmp_path):
        source = tmp_path / "legacy.csv"
        source.write_bytes(HEADER.encode() + b"\nd,Caf\xe9,Mario,Default,Standard Kart,1:00.000\n\xff")
        result = runner.invoke(app, ["import", str(source), "--mode", "append"])
        assert result.exit_code == 1
        assert "Error reading" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert len(get_record_store().ledger) == 0

    def test_best_and_podium(self, profile_id):
        for time in ["1:20.000", "1:15.000", "1:18.000", "1:30.000"]:
            runner.invoke(app, ["add", time, "Mario Circuit"])
        result = runner.invoke(app, ["best"])
        assert result.exit_code == 0
        assert "1:15.000" in result.output
        assert "1:18.000" not in result.output
        result = runner.invoke(app, ["best", "--podium"])
        assert result.exit_code == 0
        for time in ["1:15.000", "1:18.000", "1:20.000"]:
            assert time in result.output
        assert "1:30.000" not in result.output

    @pytest.fixture
    def read_only_storage(self):
        error = StorageError("mkw-times", "read-only file system")
        with patch.object(FileKeyValueStore, "set", side_effect=error), \
                patch.object(FileKeyValueStore, "delete", side_effect=error):
            yield

    @pytest.mark.parametrize("args", [
        ["dates", "absolute"],
        ["reset", "--yes"],
    ])
    def test_storage_errors_are_reported(self, read_only_storage, args):
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "read-only file system" in result.output

    def test_storage_error_on_import(self, profile_id, tmp_path):
        source = tmp_path / "in.csv"
        source.write_text(f"{HEADER}\nd,A,Mario,Default,Standard Kart,1:00.000")
        with patch.object(FileKeyValueStore, "set", side_effect=StorageError("mkw-times", "disk full")):
            result = runner.invoke(app, ["import", str(source), "--mode", "append"])
        assert result.exit_code == 1
        assert "disk full" in result.output

    def test_storage_error_on_profile_remove(self, profile_id):
        with patch.object(FileKeyValueStore, "set", side_effect=StorageError("mkw-profiles", "disk full")):
            result = runner.invoke(app, ["profile", "remove", profile_id])
        assert result.exit_code == 1
        assert "disk full" in result.output
        assert config.get_active_profile_id() == profile_id


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
