"""Unit tests for CLI components."""

import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from jp_reachable.cli.main import cli
from jp_reachable.collector.aggregator import aggregate
from jp_reachable.collector.pipeline import CollectionResult
from jp_reachable.collector.writer import write_structured
from jp_reachable.core.exceptions import CollectionError, OutputWriteError


class TestCLI:
    """Test CLI commands."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_cli_version(self):
        """Test CLI version option."""
        result = self.runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_cli_help(self):
        """Test CLI help."""
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Japanese Reachable Stations" in result.output
        assert "collect" in result.output
        assert "query" in result.output

    @patch("jp_reachable.cli.main.collect")
    def test_collect_command_success(self, mock_collect, small_config, make_row, tmp_path):
        """Test a successful collection prints a summary."""
        rows = [make_row("A"), make_row("B")]
        mock_collect.return_value = CollectionResult(
            rows=rows,
            output=aggregate(rows, small_config),
            flat_path=Path("out/reachable_flat.json"),
            structured_path=Path("out/reachable_structured.json"),
        )

        result = self.runner.invoke(cli, ["collect", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "Rows: 2" in result.output
        assert "Stations: 2" in result.output
        assert "reachable_structured.json" in result.output

        config = mock_collect.call_args.args[0]
        assert config.output_dir == Path(tmp_path)
        assert [origin.name for origin in config.origins] == ["茅場町", "八丁堀", "水天宮前"]

    @patch("jp_reachable.cli.main.collect")
    def test_collect_command_overrides(self, mock_collect, tmp_path):
        """Test command line options override the configuration."""
        mock_collect.side_effect = CollectionError("stop")

        self.runner.invoke(
            cli, ["collect", "--retries", "1", "--timeout", "9", "--pacing", "0"]
        )

        config = mock_collect.call_args.args[0]
        assert config.retry.retries == 1
        assert config.retry.timeout == 9.0
        assert config.retry.backoff == 0.7
        assert config.pacing_delay == 0.0

    @patch("jp_reachable.cli.main.collect")
    def test_collect_command_with_config_file(self, mock_collect, tmp_path):
        """Test a JSON configuration file is loaded."""
        mock_collect.side_effect = CollectionError("stop")
        config_file = tmp_path / "run.json"
        config_file.write_text(
            json.dumps(
                {
                    "origins": [{"name": "茅場町", "node": "00001303"}],
                    "bands": ["0-10"],
                    "pacing_delay": 1.5,
                }
            ),
            encoding="utf-8",
        )

        self.runner.invoke(cli, ["collect", "--config", str(config_file)])

        config = mock_collect.call_args.args[0]
        assert len(config.origins) == 1
        assert [band.label for band in config.bands] == ["0-10"]
        assert config.pacing_delay == 1.5

    @patch("jp_reachable.cli.main.collect")
    def test_collect_command_collection_error(self, mock_collect):
        """Test an aborted run exits non-zero."""
        mock_collect.side_effect = CollectionError("Failed to collect 茅場町 0-10: boom")

        result = self.runner.invoke(cli, ["collect"])

        assert result.exit_code == 1
        assert "Collection failed" in result.output

    @patch("jp_reachable.cli.main.collect")
    def test_collect_command_write_error(self, mock_collect):
        """Test a write failure exits non-zero."""
        mock_collect.side_effect = OutputWriteError("Failed to write out.json: disk full")

        result = self.runner.invoke(cli, ["collect"])

        assert result.exit_code == 1
        assert "Write error" in result.output

    @patch("jp_reachable.cli.main.collect")
    def test_collect_command_invalid_option(self, mock_collect):
        """Test an invalid override is reported as a configuration error."""
        result = self.runner.invoke(cli, ["collect", "--retries", "-1"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        mock_collect.assert_not_called()

    def test_query_command_table(self, small_config, make_row, tmp_path):
        """Test querying an index with table output."""
        rows = [make_row("A", minutes=4, station_name="日本橋"), make_row("B", minutes=9)]
        index_file = write_structured(aggregate(rows, small_config), tmp_path / "s.json")

        result = self.runner.invoke(
            cli, ["query", str(index_file), "--max-minutes", "5"]
        )

        assert result.exit_code == 0
        assert "日本橋" in result.output
        assert "駅B" not in result.output

    def test_query_command_json(self, small_config, make_row, tmp_path):
        """Test querying an index with JSON output."""
        rows = [make_row("A", minutes=4), make_row("B", minutes=9, line="都営浅草線")]
        index_file = write_structured(aggregate(rows, small_config), tmp_path / "s.json")

        result = self.runner.invoke(
            cli,
            ["query", str(index_file), "--keyword", "浅草", "--format", "json"],
        )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [item["stationId"] for item in data] == ["B"]

    def test_query_command_limit(self, small_config, make_row, tmp_path):
        """Test the result limit."""
        rows = [make_row("A", minutes=4), make_row("B", minutes=9)]
        index_file = write_structured(aggregate(rows, small_config), tmp_path / "s.json")

        result = self.runner.invoke(
            cli, ["query", str(index_file), "--format", "json", "--limit", "1"]
        )

        assert [item["stationId"] for item in json.loads(result.output)] == ["A"]

    def test_query_command_invalid_index(self, tmp_path):
        """Test a file that is not an index exits non-zero."""
        index_file = tmp_path / "bad.json"
        index_file.write_text("[]", encoding="utf-8")

        result = self.runner.invoke(cli, ["query", str(index_file)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_query_command_pref_code(self, small_config, make_row, tmp_path):
        """Test the prefecture option accepts a JIS code."""
        rows = [
            make_row("A", minutes=4),
            make_row("B", minutes=9, rough_address="千葉県浦安市", pref="千葉県"),
        ]
        index_file = write_structured(aggregate(rows, small_config), tmp_path / "s.json")

        result = self.runner.invoke(
            cli, ["query", str(index_file), "--pref", "12", "--format", "json"]
        )

        assert [item["stationId"] for item in json.loads(result.output)] == ["B"]

    def test_query_command_unreadable_index(self, tmp_path):
        """Test an unreadable index file exits non-zero without a traceback."""
        index_file = tmp_path / "s.json"
        index_file.write_text("{}", encoding="utf-8")

        with patch(
            "jp_reachable.cli.main.ReachableIndex.load",
            side_effect=PermissionError("Permission denied"),
        ):
            result = self.runner.invoke(cli, ["query", str(index_file)])

        assert result.exit_code == 1
        assert "Failed to read index" in result.output
        assert not isinstance(result.exception, PermissionError)

    def test_config_show_command(self):
        """Test config show command."""
        result = self.runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "Current Configuration" in result.output
        assert "茅場町" in result.output

    def test_config_show_invalid_file(self, tmp_path):
        """Test config show with an invalid configuration file."""
        config_file = tmp_path / "bad.json"
        config_file.write_text(json.dumps({"bands": ["20-10"]}), encoding="utf-8")

        result = self.runner.invoke(cli, ["config", "show", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
