import pytest

from schema_to_baml import pipeline as pipeline_module
from schema_to_baml.config import BuildConfig, RetryConfig, SchemaToBamlConfig
from schema_to_baml.errors import CompileError, TranslationError
from schema_to_baml.pipeline import SchemaToBaml, generate_object

SCHEMA = {
    "type": "object",
    "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
    "required": ["id", "name"],
}

STUB_CLIENT = """import json


class _Parse:
    def {function_name}(self, text):
        return json.loads(text)


class _Client:
    parse = _Parse()


b = _Client()
"""


class FakeCompiler:
    """Writes a stub client instead of running baml-cli"""

    def __init__(self, function_name="GenRoot", fail=False):
        self.function_name = function_name
        self.fail = fail
        self.compiled = []

    def compile(self, workspace):
        self.compiled.append(workspace.key)
        if self.fail:
            raise CompileError("bad source", returncode=1)
        assert workspace.source_path.exists()
        workspace.client_dir.mkdir(parents=True, exist_ok=True)
        (workspace.client_dir / "__init__.py").write_text(STUB_CLIENT.format(function_name=self.function_name))


def make_config(tmp_path):
    return SchemaToBamlConfig(build=BuildConfig(cache_root=str(tmp_path)), retry=RetryConfig(max_attempts=2, retry_delay=0.5))


class TestBuild:
    """Test the build cache"""

    def test_compiles_once(self, tmp_path):
        compiler = FakeCompiler()
        pipeline = SchemaToBaml(make_config(tmp_path), compiler=compiler)

        source, parser = pipeline.build(SCHEMA)
        source_again, parser_again = pipeline.build(SCHEMA)

        assert compiler.compiled == [source.cache_key]
        assert source_again.cache_key == source.cache_key
        assert parser_again is parser
        assert (tmp_path / source.cache_key / "baml_src" / "schema.baml").read_text(encoding="utf-8") == source.text

    def test_cache_survives_new_pipeline(self, tmp_path):
        first = FakeCompiler()
        SchemaToBaml(make_config(tmp_path), compiler=first).build(SCHEMA)

        second = FakeCompiler()
        SchemaToBaml(make_config(tmp_path), compiler=second).build(SCHEMA)

        assert len(first.compiled) == 1
        assert second.compiled == []

    def test_empty_client_dir_is_recompiled(self, tmp_path):
        compiler = FakeCompiler()
        pipeline = SchemaToBaml(make_config(tmp_path), compiler=compiler)
        workspace = pipeline.workspace(pipeline.render(SCHEMA))
        workspace.client_dir.mkdir(parents=True)

        pipeline.build(SCHEMA)

        assert compiler.compiled == [workspace.key]

    def test_distinct_schemas_get_distinct_workspaces(self, tmp_path):
        compiler = FakeCompiler()
        pipeline = SchemaToBaml(make_config(tmp_path), compiler=compiler)

        pipeline.build(SCHEMA)
        pipeline.build({"type": "array", "items": {"type": "string"}})

        assert len(set(compiler.compiled)) == 2

    def test_compile_error_propagates(self, tmp_path):
        pipeline = SchemaToBaml(make_config(tmp_path), compiler=FakeCompiler(fail=True))

        with pytest.raises(CompileError):
            pipeline.build(SCHEMA)

    def test_translation_error_before_compile(self, tmp_path):
        compiler = FakeCompiler()
        pipeline = SchemaToBaml(make_config(tmp_path), compiler=compiler)

        with pytest.raises(TranslationError):
            pipeline.build({"type": "object"})
        assert compiler.compiled == []

    def test_sink(self, tmp_path):
        messages = []
        pipeline = SchemaToBaml(make_config(tmp_path), compiler=FakeCompiler(), sink=messages.append)

        pipeline.build(SCHEMA)
        pipeline.build(SCHEMA)

        assert messages[0].startswith("Cache miss for ")
        assert messages[-1].startswith("Cache hit for ")


class TestGenerateObject:
    """Test structured generation through the pipeline"""

    def test_generate_object(self, tmp_path):
        requests = []

        def generate_text(**request):
            requests.append(request)
            return {"text": '{"id": 7, "name": "Ada"}', "usage": {"total_tokens": 12}, "finishReason": "stop"}

        pipeline = SchemaToBaml(make_config(tmp_path), compiler=FakeCompiler())
        result = pipeline.generate_object(SCHEMA, generate_text, "gpt-test", prompt="Make a user")

        assert result.object == {"id": 7, "name": "Ada"}
        assert result.usage == {"total_tokens": 12}
        assert requests[0]["model"] == "gpt-test"
        assert requests[0]["prompt"] == (
            "You are to output ONLY valid JSON with no extra text. "
            "The JSON must match the following structure: { id: number, name: string }."
            "\n\nMake a user"
        )

    def test_retry_uses_configured_delay(self, tmp_path):
        sleeps = []
        calls = []

        def generate_text(**request):
            calls.append(request)
            if len(calls) == 1:
                raise ConnectionError("reset")
            return {"text": '{"id": 1, "name": "a"}'}

        pipeline = SchemaToBaml(make_config(tmp_path), compiler=FakeCompiler(), sleep=sleeps.append)
        pipeline.generate_object(SCHEMA, generate_text, "gpt-test", messages=[{"role": "user", "content": "hi"}])

        assert sleeps == [0.5]
        assert calls[0]["messages"][0]["role"] == "system"

    def test_requires_schema_and_input(self, tmp_path):
        pipeline = SchemaToBaml(make_config(tmp_path), compiler=FakeCompiler())

        with pytest.raises(ValueError):
            pipeline.generate_object(None, lambda **kw: {"text": "{}"}, "gpt-test", prompt="x")
        with pytest.raises(ValueError):
            pipeline.generate_object(SCHEMA, lambda **kw: {"text": "{}"}, "gpt-test")

    def test_module_level_generate_object(self, tmp_path, monkeypatch):
        monkeypatch.setattr(pipeline_module, "_default_pipeline", SchemaToBaml(make_config(tmp_path), compiler=FakeCompiler()))

        result = generate_object(SCHEMA, lambda **kw: {"text": '{"id": 3, "name": "b"}'}, "gpt-test", prompt="x")

        assert result.object == {"id": 3, "name": "b"}


if __name__ == "__main__":
    pytest.main([__file__])
