"""
Unit tests for the 'impact' command.
"""

import json

from click.testing import CliRunner

from bobble.cli.commands.impact import impact


class TestImpactCommand:
    def test_ranking_json(self, stats_file):
        runner = CliRunner()
        result = runner.invoke(impact, ["main", "--stats", str(stats_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["scored"] == 4
        assert data["pending"] == 0
        assert [i["name"] for i in data["impacts"]] == [
            "./src/index.js",
            "./src/charts.js",
            "./src/table.js",
            "./node_modules/lodash.js",
        ]
        assert [i["saved_size"] for i in data["impacts"]] == [55, 20, 20, 5]

    def test_ranking_with_cut(self, stats_file):
        runner = CliRunner()
        result = runner.invoke(impact, ["main", "--stats", str(stats_file), "--cut", "2", "--top", "2", "--json"])

        data = json.loads(result.stdout)["data"]
        assert data["reachable_size"] == 35
        assert [(i["node_id"], i["saved_size"]) for i in data["impacts"]] == [(1, 35), (3, 25)]

    def test_text_output(self, stats_file):
        runner = CliRunner()
        result = runner.invoke(impact, ["main", "--stats", str(stats_file), "--top", "1"])

        assert result.exit_code == 0
        assert "4 reachable, size=55B" in result.output
        assert "1. +55B" in result.output
        assert "./src/charts.js" not in result.output

    def test_top_must_be_positive(self, stats_file):
        runner = CliRunner()
        for top in ("0", "-1"):
            result = runner.invoke(impact, ["main", "--stats", str(stats_file), "--top", top])
            assert result.exit_code == 2
