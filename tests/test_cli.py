from pathlib import Path

import yaml
from click.testing import CliRunner

from api_resource_resolver.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliAnalyze:
    def test_analyze_prints_resources(self):
        runner = CliRunner()
        result = runner.invoke(main, ["analyze", str(FIXTURES / "shop.yaml")])

        assert result.exit_code == 0
        assert "Found 11 endpoints." in result.output
        assert "/shops/{shopId}/items/{itemId}" in result.output
        assert "creation: COMPLETE POST:/shops -> POST:/shops/{shopId}/items" in result.output

    def test_analyze_writes_yaml_report(self, tmp_path):
        output = tmp_path / "out" / "report.yaml"
        runner = CliRunner()
        result = runner.invoke(main, ["analyze", str(FIXTURES / "shop.yaml"), "-o", str(output)])

        assert result.exit_code == 0
        report = yaml.safe_load(output.read_text(encoding="utf-8"))
        by_path = {r["path"]: r for r in report["resources"]}
        assert by_path["/health"]["independent"] is True
        assert by_path["/shops/{shopId}"]["ancestors"] == ["/shops"]
        assert by_path["/shops/{shopId}"]["post_chain"]["actions"] == ["POST:/shops"]
        assert "POST-GET" in by_path["/shops"]["templates"]

    def test_analyze_with_config(self, tmp_path):
        config = tmp_path / "resolver.yaml"
        config.write_text("tables: [SHOP]\n")
        output = tmp_path / "report.yaml"
        runner = CliRunner()
        result = runner.invoke(main, [
            "analyze", str(FIXTURES / "shop.yaml"),
            "--config", str(config),
            "-o", str(output),
        ])

        assert result.exit_code == 0
        report = yaml.safe_load(output.read_text(encoding="utf-8"))
        by_path = {r["path"]: r for r in report["resources"]}
        assert by_path["/shops"]["tables"] == ["SHOP"]

    def test_analyze_bad_config(self, tmp_path):
        config = tmp_path / "resolver.yaml"
        config.write_text("max_test_size: -1\n")
        runner = CliRunner()
        result = runner.invoke(main, ["analyze", str(FIXTURES / "shop.yaml"), "--config", str(config)])

        assert result.exit_code != 0
        assert "max_test_size" in result.output


class TestCliSample:
    def test_sample_nested_item(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "sample", str(FIXTURES / "shop.yaml"), "GET /shops/{shopId}/items/{itemId}",
            "--seed", "3",
        ])

        assert result.exit_code == 0
        assert "Status: CREATED" in result.output
        assert "1. POST /shops  (saves location)" in result.output
        assert "2. POST /shops/{shopId}/items  (saves location, uses location of shops)" in result.output
        assert "3. GET /shops/{shopId}/items/{itemId}  (uses location of items)" in result.output

    def test_sample_unknown_target(self):
        runner = CliRunner()
        result = runner.invoke(main, ["sample", str(FIXTURES / "shop.yaml"), "PUT /nowhere"])

        assert result.exit_code != 0
        assert "no action" in result.output

    def test_sample_too_short(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "sample", str(FIXTURES / "shop.yaml"), "GET /shops/{shopId}",
            "--max-size", "1",
        ])

        assert result.exit_code == 0
        assert "Status: NOT_ENOUGH_LENGTH" in result.output


class TestCliPick:
    def test_pick_rotates_templates(self):
        runner = CliRunner()
        result = runner.invoke(main, ["pick", str(FIXTURES / "shop.yaml"), "/shops", "-n", "3"])

        assert result.exit_code == 0
        assert "1. POST\n" in result.output
        assert "2. GET\n" in result.output
        assert "3. POST-GET\n" in result.output

    def test_pick_unknown_resource(self):
        runner = CliRunner()
        result = runner.invoke(main, ["pick", str(FIXTURES / "shop.yaml"), "/nowhere"])

        assert result.exit_code != 0
        assert "no resource" in result.output
