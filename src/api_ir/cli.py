"""CLI entry point for api-ir."""

import logging
from pathlib import Path

import click

from api_ir.analysis.cache_keys import derive_cache_key_factories
from api_ir.analysis.circular import find_circular_types
from api_ir.errors import ParseError
from api_ir.loader import parse_spec
from api_ir.parser.base import ApiSpec, ParseOptions

FORMATS = ["auto", "openapi", "swagger", "graphql"]


def _parse_doc(doc_path: Path, fmt: str, base_url: str | None) -> ApiSpec:
    """Parse API document, turning parse failures into CLI errors."""
    try:
        return parse_spec(doc_path, ParseOptions(base_url=base_url), fmt=fmt)
    except ParseError as e:
        raise click.ClickException(f"[{e.kind.value}] {e.message}") from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool):
    """api-ir: normalize OpenAPI, Swagger and GraphQL documents into one IR."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the IR JSON to this file.")
@click.option("--base-url", default=None, help="Override the document's base URL.")
@click.option("--format", "fmt", default="auto", type=click.Choice(FORMATS), help="Document format.")
def parse(doc_path: Path, output: Path | None, base_url: str | None, fmt: str):
    """Print the normalized IR of an API document as JSON."""
    spec = _parse_doc(doc_path, fmt, base_url)
    payload = spec.model_dump_json(indent=2)

    if output is None:
        click.echo(payload)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload, encoding="utf-8")
    click.echo(f"IR saved to {output}")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("--base-url", default=None, help="Override the document's base URL.")
@click.option("--format", "fmt", default="auto", type=click.Choice(FORMATS), help="Document format.")
def analyze(doc_path: Path, base_url: str | None, fmt: str):
    """Summarize operations, circular types, pagination and cache-key resources."""
    spec = _parse_doc(doc_path, fmt, base_url)
    click.echo(f"{spec.title} {spec.version} ({spec.base_url or 'no base URL'})")
    click.echo(f"Found {len(spec.operations)} operations, {len(spec.types)} named types.")

    circular = sorted(find_circular_types(spec.types))
    click.echo(f"Circular types: {', '.join(circular) if circular else 'none'}")

    paginated = [op for op in spec.operations if op.pagination]
    click.echo(f"Paginated operations: {len(paginated)}")
    for op in paginated:
        click.echo(f"  {op.operation_id}: {op.pagination.strategy} via {op.pagination.page_param}")

    factories = derive_cache_key_factories(spec.operations)
    click.echo(f"Cache-key resources: {len(factories)}")
    for factory in factories:
        shapes = [name for name, present in (("list", factory.has_list), ("detail", factory.has_detail)) if present]
        click.echo(f"  {factory.variable_name}: {'/'.join(shapes)}")
