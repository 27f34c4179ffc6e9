"""dev-analyzer CLI - frontend dev-server build analyzer."""

import json
import logging
import os

import click

from devanalyzer import __version__


def get_api_key(api_key, config_key=""):
    """Resolve the LLM API key from option, config file or environment."""
    return api_key or config_key or os.environ.get("OPENAI_API_KEY") or None


@click.group()
@click.option("--debug", is_flag=True, help="Log debug output to stderr.")
@click.version_option(version=__version__, prog_name="dev-analyzer")
def cli(debug):
    """dev-analyzer - frontend dev-server build analyzer."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--cwd", default=".", type=click.Path(exists=True, file_okay=False), help="Project root.")
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON.")
def detect(cwd, as_json):
    """Show the detected package manager and framework."""
    from devanalyzer.detector import detect_manager

    result = detect_manager(cwd)
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    version = f" {result.framework.version}" if result.framework.version else ""
    click.echo(f"Package manager: {result.package_manager}")
    click.echo(f"Framework: {result.framework.name}{version}")

from devanalyzer.cli.analyze_cmd import analyze_cmd
from devanalyzer.cli.parse_cmd import parse_cmd

cli.add_command(analyze_cmd)
cli.add_command(parse_cmd)
