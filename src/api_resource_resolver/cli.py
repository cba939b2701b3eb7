"""CLI entry point for api-resource-resolver."""

import logging
from pathlib import Path

import click
import yaml

from api_resource_resolver.config import ResolverConfig, load_config
from api_resource_resolver.parser.swagger import parse_openapi
from api_resource_resolver.resource.cluster import ResourceCluster
from api_resource_resolver.resource.node import RestResourceNode
from api_resource_resolver.resource.randomness import SeededRandomness


def _build_cluster(doc_path: Path, config_path: Path | None) -> ResourceCluster:
    """Parse the API document and build its resource cluster."""
    try:
        config = load_config(config_path) if config_path else ResolverConfig()
        endpoints = parse_openapi(doc_path)
        click.echo(f"Found {len(endpoints)} endpoints.")
        return ResourceCluster.from_endpoints(endpoints, config)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _describe(node: RestResourceNode) -> dict:
    chain = node.get_post_chain()
    return {
        "path": node.get_name(),
        "ancestors": [a.get_name() for a in node.ancestors],
        "verbs": node.verb_inventory(),
        "independent": node.is_independent(),
        "templates": {
            key: {"independent": t.independent, "size": t.size}
            for key, t in node.get_templates().items()
        },
        "post_chain": {
            "status": chain.status.value,
            "actions": [a.get_name() for a in chain.actions],
        } if chain else None,
        "missing_params": sorted(k for k, info in node.params_info.items() if info.missing),
        "tables": node.get_sql_creation_points(),
    }


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show resolution details.")
def main(verbose: bool):
    """API Resource Resolver: infer how to create the resources each endpoint needs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML resolver configuration.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the analysis as YAML.")
def analyze(doc_path: Path, config_path: Path | None, output: Path | None):
    """Describe how each resource of DOC_PATH is created and exercised."""
    cluster = _build_cluster(doc_path, config_path)
    report = [_describe(node) for node in cluster.nodes]

    for entry in report:
        chain = entry["post_chain"]
        click.echo(f"\n{entry['path']}")
        click.echo(f"  ancestors: {', '.join(entry['ancestors']) or '-'}")
        click.echo(f"  templates: {', '.join(entry['templates'])}")
        if chain:
            click.echo(f"  creation: {chain['status']} {' -> '.join(chain['actions']) or '-'}")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(yaml.safe_dump({"resources": report}, sort_keys=False), encoding="utf-8")
        click.echo(f"\nAnalysis saved to {output}")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.argument("target")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML resolver configuration.")
@click.option("--seed", default=None, type=int, help="Seed for tie-breaks between creators.")
@click.option("--max-size", default=None, type=click.IntRange(min=1), help="Maximum number of calls in the sequence.")
def sample(doc_path: Path, target: str, config_path: Path | None, seed: int | None, max_size: int | None):
    """Build the call sequence that prepares TARGET, e.g. "GET /pets/{petId}"."""
    cluster = _build_cluster(doc_path, config_path)
    randomness = SeededRandomness(seed if seed is not None else cluster.config.seed)

    try:
        status, sequence = cluster.sample_calls(target, randomness, max_size)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Status: {status.value}")
    for i, action in enumerate(sequence, 1):
        notes = []
        if action.save_location:
            notes.append("saves location")
        if action.location_id:
            notes.append(f"uses location of {action.location_id}")
        suffix = f"  ({', '.join(notes)})" if notes else ""
        click.echo(f"  {i}. {action.verb.value} {action.path}{suffix}")


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.argument("resource_path")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML resolver configuration.")
@click.option("--seed", default=None, type=int, help="Seed for random template choice.")
@click.option("-n", "--count", default=1, type=click.IntRange(min=1), help="Number of templates to pick.")
def pick(doc_path: Path, resource_path: str, config_path: Path | None, seed: int | None, count: int):
    """Pick call templates for RESOURCE_PATH the way a test generator would."""
    cluster = _build_cluster(doc_path, config_path)
    randomness = SeededRandomness(seed if seed is not None else cluster.config.seed)

    try:
        for i in range(1, count + 1):
            template = cluster.select_template(resource_path, randomness)
            click.echo(f"  {i}. {template.template}")
    except ValueError as e:
        raise click.ClickException(str(e)) from e
