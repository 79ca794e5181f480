"""
Schema to BAML pipeline.

1. Translate the schema to BAML declarations
2. Render the BAML source
3. Look the source up in the build cache, compile it on a miss
4. Load the generated client
5. Generate text with the JSON hint and parse it with the client
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .analyzer import BamlSource, BamlTranslator, TranslationContext
from .backends import BamlBackend
from .build import BamlCompiler, GeneratedParser, ParserLoader, Workspace, content_hash
from .config import SchemaToBamlConfig, TranslatorConfig
from .diagnostics import DiagnosticSink, null_sink
from .hint import build_json_hint
from .orchestrator import GenerateObjectResult, GenerationOrchestrator, TextGenerator
from .schema_ast import to_schema_node


def build_baml_source(schema: Any, config: TranslatorConfig | None = None) -> BamlSource:
    """
    Translate a schema and render it as BAML source.

    Args:
        schema: A SchemaNode, a JSON Schema dictionary, or a pydantic model class
        config: Translator configuration (root name, function name, client)

    Returns:
        The rendered source with its function name, root type and cache key
    """
    config = config or TranslatorConfig()
    node = to_schema_node(schema)
    context = TranslationContext()
    root_type = BamlTranslator(config).translate(node, context, config.root_name)
    text = BamlBackend(config).render(context, config.function_name, root_type)
    return BamlSource(
        text=text,
        function_name=config.function_name,
        root_type=root_type,
        cache_key=content_hash(text),
    )


class SchemaToBaml:
    """Builds parsers for schemas and runs structured generation with them."""

    def __init__(
        self,
        config: SchemaToBamlConfig | None = None,
        compiler: BamlCompiler | None = None,
        loader: ParserLoader | None = None,
        sink: DiagnosticSink = null_sink,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration
            compiler: Compiler invoker (defaults to BamlCompiler)
            loader: Generated client loader (defaults to ParserLoader)
            sink: Diagnostic sink for build details
            sleep: Used by the orchestrator between attempts
        """
        self.config = config or SchemaToBamlConfig()
        self.sink = sink
        self.sleep = sleep
        self.compiler = compiler or BamlCompiler(self.config.build, sink)
        self.loader = loader or ParserLoader(sink)

    def render(self, schema: Any) -> BamlSource:
        """Render a schema with the translator configuration of this pipeline."""
        return build_baml_source(schema, self.config.translator)

    def hint(self, schema: Any) -> str:
        return build_json_hint(to_schema_node(schema))

    def workspace(self, source: BamlSource) -> Workspace:
        return Workspace.for_source(source.text, self.config.build)

    def build(self, schema: Any) -> tuple[BamlSource, GeneratedParser]:
        """
        Render a schema and load its parser, compiling only on a cache miss.

        Returns:
            (source, parser)

        Raises:
            TranslationError, CompileError, ArtifactNotFoundError
        """
        source = self.render(schema)
        workspace = self.workspace(source)
        if workspace.is_built:
            self.sink(f"Cache hit for {workspace.key}")
        else:
            self.sink(f"Cache miss for {workspace.key}, writing {workspace.source_path}")
            workspace.prepare(source.text)
            self.compiler.compile(workspace)
        return source, self.loader.load(workspace)

    def generate_object(
        self,
        schema: Any,
        generate_text: TextGenerator,
        model: Any,
        prompt: str | None = None,
        messages: Sequence[Mapping[str, Any]] | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
    ) -> GenerateObjectResult:
        """
        Generate an object matching a schema.

        Args:
            schema: A SchemaNode, a JSON Schema dictionary, or a pydantic model class
            generate_text: The text generation collaborator
            model: Model handle passed through to the collaborator
            prompt: Free-text request
            messages: Role-tagged chat messages (alternative to prompt)
            max_tokens: Maximum output length
            temperature: Sampling temperature
            top_p: Nucleus sampling threshold

        Returns:
            GenerateObjectResult with the parsed object and raw text
        """
        if schema is None:
            raise ValueError("schema is required")
        if prompt is None and messages is None:
            raise ValueError("prompt or messages is required")

        node = to_schema_node(schema)
        source, parser = self.build(node)
        orchestrator = GenerationOrchestrator(
            generate_text,
            parser,
            source.function_name,
            retry=self.config.retry,
            sleep=self.sleep,
        )
        return orchestrator.run(
            model,
            build_json_hint(node),
            prompt=prompt,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            top_p=top_p,
        )


_default_pipeline: SchemaToBaml | None = None


def generate_object(schema: Any, generate_text: TextGenerator, model: Any, **kwargs: Any) -> GenerateObjectResult:
    """Generate an object with a process-wide default pipeline."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = SchemaToBaml()
    return _default_pipeline.generate_object(schema, generate_text, model, **kwargs)
