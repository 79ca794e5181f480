import json

import pytest
from click.testing import CliRunner

from schema_to_baml import schema_to_baml as cli_module
from schema_to_baml.orchestrator import GenerateObjectResult
from schema_to_baml.schema_to_baml import schema_to_baml

SCHEMA = {
    "type": "object",
    "properties": {"title": {"type": "string"}, "pages": {"type": "integer"}},
    "required": ["title"],
}


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "book.json"
    path.write_text(json.dumps(SCHEMA))
    return path


class TestCli:
    """Test the command line interface"""

    def test_render(self, schema_file):
        result = CliRunner().invoke(schema_to_baml, ["render", str(schema_file)])

        assert result.exit_code == 0, result.output
        assert "class Root {\n  title string\n  pages int?\n}" in result.output
        assert "function GenRoot(input: string) -> Root {" in result.output

    def test_render_to_file(self, schema_file, tmp_path):
        output = tmp_path / "out" / "schema.baml"
        output.parent.mkdir()

        result = CliRunner().invoke(schema_to_baml, ["render", str(schema_file), str(output)])

        assert result.exit_code == 0, result.output
        assert "class Root {" in output.read_text(encoding="utf-8")

    def test_config_file(self, schema_file, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"translator": {"root_name": "Book"}}))

        result = CliRunner().invoke(schema_to_baml, ["--config", str(config), "render", str(schema_file)])

        assert result.exit_code == 0, result.output
        assert "function GenBook(input: string) -> Book {" in result.output

    def test_hint(self, schema_file):
        result = CliRunner().invoke(schema_to_baml, ["hint", str(schema_file)])

        assert result.exit_code == 0, result.output
        assert result.output.strip().endswith("structure: { title: string, pages?: number }.")

    def test_unsupported_schema(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"type": "object"}))

        result = CliRunner().invoke(schema_to_baml, ["render", str(path)])

        assert result.exit_code == 1
        assert "Unsupported schema node" in result.output

    def test_generate(self, schema_file, monkeypatch):
        captured = {}

        def fake_generate_object(self, schema, generate_text, model, **kwargs):
            captured.update(schema=schema, model=model, **kwargs)
            return GenerateObjectResult(object={"title": "Dune"}, text='{"title": "Dune"}')

        monkeypatch.setattr(cli_module.OpenAIChatGenerator, "from_env", classmethod(lambda cls: cls("sk-test")))
        monkeypatch.setattr(cli_module.SchemaToBaml, "generate_object", fake_generate_object)

        result = CliRunner().invoke(schema_to_baml, ["generate", str(schema_file), "-p", "A book", "-m", "gpt-test", "--temperature", "0.3"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"title": "Dune"}
        assert captured["schema"] == SCHEMA
        assert captured["model"] == "gpt-test"
        assert captured["prompt"] == "A book"
        assert captured["temperature"] == 0.3
        assert captured["max_tokens"] is None

    def test_generate_without_api_key(self, schema_file, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        result = CliRunner().invoke(schema_to_baml, ["generate", str(schema_file), "-p", "A book", "-m", "gpt-test"])

        assert result.exit_code == 1
        assert "OPENAI_API_KEY" in result.output


if __name__ == "__main__":
    pytest.main([__file__])
