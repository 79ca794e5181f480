import os

import pytest

from schema_to_baml.config import BuildConfig, SchemaToBamlConfig
from schema_to_baml.pipeline import SchemaToBaml

# Runs the real baml-cli; enable with SCHEMA_TO_BAML_E2E=1
pytestmark = pytest.mark.skipif(os.getenv("SCHEMA_TO_BAML_E2E") != "1", reason="SCHEMA_TO_BAML_E2E not set")

SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "integer"},
        "rating": {"type": "number"},
        "isActive": {"type": "boolean"},
        "tags": {"type": "array", "items": {"type": "string"}, "minItems": 1},
        "maybe": {"type": "string"},
        "nick": {"type": ["string", "null"]},
    },
    "required": ["id", "rating", "isActive", "tags", "nick"],
}


def test_generate_object_with_compiled_parser(tmp_path):
    pipeline = SchemaToBaml(SchemaToBamlConfig(build=BuildConfig(cache_root=str(tmp_path))))

    def generate_text(**request):
        return {"text": '{"id":1,"rating":4.5,"isActive":true,"tags":["a"],"nick":null}', "finishReason": "stop"}

    result = pipeline.generate_object(SCHEMA, generate_text, "unused", prompt="Make a record")

    assert result.object.id == 1
    assert result.object.rating == 4.5
    assert result.object.isActive is True
    assert result.object.tags == ["a"]
    assert result.object.maybe is None
    assert result.object.nick is None
    assert result.finish_reason == "stop"


def test_enum_alias_compiles(tmp_path):
    pipeline = SchemaToBaml(SchemaToBamlConfig(build=BuildConfig(cache_root=str(tmp_path))))
    schema = {
        "type": "object",
        "properties": {
            "role": {"enum": ["Admin", "User"]},
            "region": {"enum": ["North America", "EU"]},
        },
        "required": ["role", "region"],
    }

    _, parser = pipeline.build(schema)
    parsed = parser.parse("GenRoot", '{"role": "Admin", "region": "North America"}')

    assert parsed.role.value == "Admin"
    assert parsed.region == "North America"


if __name__ == "__main__":
    pytest.main([__file__])
