import json
import logging
from pathlib import Path

import click

from .clients import OpenAIChatGenerator
from .config import SchemaToBamlConfig
from .diagnostics import logger_sink, null_sink
from .errors import SchemaToBamlError
from .pipeline import SchemaToBaml


def _load_json(path):
    with open(path) as f:
        return json.load(f)


def _to_jsonable(value):
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value


@click.group()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log build diagnostics to stderr")
@click.pass_context
def schema_to_baml(ctx, config, verbose):
    """Translate JSON Schemas to BAML parsers and generate structured output."""
    if config is not None:
        config = SchemaToBamlConfig.from_dict(_load_json(config))
    else:
        config = SchemaToBamlConfig()

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.obj = SchemaToBaml(config, sink=logger_sink() if verbose else null_sink)


@schema_to_baml.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, required=False, type=click.Path(resolve_path=True))
@click.pass_obj
def render(pipeline, path, output):
    """Print (or write to OUTPUT) the BAML source for a JSON Schema."""
    try:
        source = pipeline.render(_load_json(path))
    except SchemaToBamlError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(source.text, nl=False)
    else:
        Path(output).write_text(source.text, encoding="utf-8")


@schema_to_baml.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.pass_obj
def hint(pipeline, path):
    """Print the JSON hint for a JSON Schema."""
    try:
        click.echo(pipeline.hint(_load_json(path)))
    except SchemaToBamlError as e:
        raise click.ClickException(str(e)) from e


@schema_to_baml.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.pass_obj
def build(pipeline, path):
    """Compile (or reuse) the parser for a JSON Schema and print its workspace."""
    try:
        source, parser = pipeline.build(_load_json(path))
    except SchemaToBamlError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"workspace: {parser.workspace.path}")
    click.echo(f"key: {source.cache_key}")
    click.echo(f"function: {source.function_name}")


@schema_to_baml.command()
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.option("--prompt", "-p", required=True, type=str)
@click.option("--model", "-m", required=True, envvar="OPENAI_MODEL_ID", type=str)
@click.option("--max-tokens", default=None, type=int)
@click.option("--temperature", default=None, type=float)
@click.option("--top-p", default=None, type=float)
@click.pass_obj
def generate(pipeline, path, prompt, model, max_tokens, temperature, top_p):
    """Generate an object for a JSON Schema with an OpenAI-compatible API."""
    try:
        result = pipeline.generate_object(
            _load_json(path),
            OpenAIChatGenerator.from_env(),
            model,
            prompt=prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            top_p=top_p,
        )
    except SchemaToBamlError as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(_to_jsonable(result.object), indent=2, ensure_ascii=False))
