"""CLI command: dev-analyzer parse - score a saved dev-server log offline."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from devanalyzer.collector import read_log_file
from devanalyzer.config import load_config
from devanalyzer.errors import ConfigError
from devanalyzer.evaluator import evaluate, load_evaluation_context
from devanalyzer.formatter import format_report
from devanalyzer.parsers import transform_logs
from devanalyzer.reporter import build_json_payload


@click.command("parse")
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--framework", "-f", default="Next.js", show_default=True, help="Framework that produced the log.")
@click.option("--cwd", default=".", type=click.Path(exists=True, file_okay=False), help="Project root for config lookup.")
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--verbose", is_flag=True, help="List every issue and config file.")
@click.option("--fail-under", type=int, default=None, help="Exit 1 when the score is below this value.")
def parse_cmd(
    log_file: str,
    framework: str,
    cwd: str,
    as_json: bool,
    verbose: bool,
    fail_under: int | None,
) -> None:
    """Parse LOG_FILE and print metrics, score and recommendations.

    No dev process and no LLM call: handy for CI or for replaying a log.

    \b
    Examples:
        dev-analyzer parse dev.log
        dev-analyzer parse dev.log --json-output --fail-under 70
    """
    root = Path(cwd).resolve()
    try:
        config = load_config(root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    transform = transform_logs(framework, read_log_file(log_file))
    context = load_evaluation_context(transform, cwd=root, include_configs=config.extra_configs)
    result = evaluate(context, thresholds=config.thresholds, llm=None)

    if as_json:
        click.echo(json.dumps(build_json_payload(result), indent=2, ensure_ascii=False))
    else:
        click.echo(format_report(result, use_color=sys.stdout.isatty(), verbose=verbose))

    if fail_under is not None and result.score < fail_under:
        sys.exit(1)
