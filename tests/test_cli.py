import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from api_ir.cli import main
from api_ir.errors import ErrorKind, ParseError

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliParse:
    def test_parse_prints_ir_json(self):
        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(FIXTURES / "petstore-openapi3.yaml")])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["title"] == "Petstore"
        assert len(payload["operations"]) == 7
        assert payload["types"]["Category"]["kind"] == "object"

    def test_parse_writes_output_file(self, tmp_path):
        output_file = tmp_path / "out" / "ir.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "parse", str(FIXTURES / "petstore-swagger2.json"),
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert output_file.exists()
        assert "IR saved to" in result.output
        assert json.loads(output_file.read_text())["base_url"] == "https://petstore.example.com/api/v1"

    def test_parse_base_url_override(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "parse", str(FIXTURES / "schema.graphql"),
            "--base-url", "https://api.example.com/graphql",
        ])

        assert result.exit_code == 0
        assert json.loads(result.output)["base_url"] == "https://api.example.com/graphql"

    def test_parse_unrecognized_document(self, tmp_path):
        doc = tmp_path / "notes.yaml"
        doc.write_text("title: Meeting notes\n")
        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(doc)])

        assert result.exit_code == 1
        assert "[format-unrecognized]" in result.output

    def test_parse_forced_format_mismatch(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "parse", str(FIXTURES / "schema.graphql"),
            "--format", "openapi",
        ])

        assert result.exit_code == 1
        assert "[format-unrecognized]" in result.output

    def test_parse_missing_file(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(tmp_path / "missing.yaml")])

        assert result.exit_code != 0

    @patch("api_ir.cli.parse_spec")
    def test_parse_error_kind_is_reported(self, mock_parse):
        mock_parse.side_effect = ParseError(ErrorKind.INVALID_DOCUMENT, "Invalid GraphQL schema: boom")
        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(FIXTURES / "schema.graphql")])

        assert result.exit_code == 1
        assert "[invalid-document] Invalid GraphQL schema: boom" in result.output


class TestCliAnalyze:
    def test_analyze_openapi(self):
        runner = CliRunner()
        result = runner.invoke(main, ["analyze", str(FIXTURES / "petstore-openapi3.yaml")])

        assert result.exit_code == 0
        assert "Petstore 1.0.0 (https://petstore.example.com/api/v1)" in result.output
        assert "Found 7 operations, 4 named types." in result.output
        assert "Circular types: Category" in result.output
        assert "listCategories: page-number via page" in result.output
        assert "petsKeys: list/detail" in result.output

    def test_analyze_graphql(self):
        runner = CliRunner()
        result = runner.invoke(main, ["analyze", str(FIXTURES / "schema.graphql")])

        assert result.exit_code == 0
        assert "GraphQL API 0.0.0 (/graphql)" in result.output
        assert "Circular types: Owner, Pet" in result.output
        assert "pets: cursor via after" in result.output

    def test_analyze_without_cycles(self):
        runner = CliRunner()
        result = runner.invoke(main, ["analyze", str(FIXTURES / "petstore-swagger2.json")])

        assert result.exit_code == 0
        assert "Circular types: none" in result.output
        assert "Paginated operations: 1" in result.output
