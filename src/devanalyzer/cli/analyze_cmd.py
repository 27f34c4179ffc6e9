"""CLI command: dev-analyzer analyze - run dev, parse logs, score, report."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import click

from devanalyzer.collector import read_log_file, run_dev_with_logs
from devanalyzer.config import load_config
from devanalyzer.detector import detect_manager
from devanalyzer.errors import CollectorError, ConfigError
from devanalyzer.evaluator import evaluate, load_evaluation_context
from devanalyzer.parsers import get_parser
from devanalyzer.reporter import write_json_report, write_markdown_report, write_text_report


def load_prompt(prompt_text: str | None, prompt_file: str | None, cwd: Path) -> str | None:
    """Custom prompt from ``--prompt`` or ``--prompt-file``; unreadable files are skipped."""
    if prompt_text:
        return prompt_text
    if prompt_file:
        path = (cwd / prompt_file).resolve()
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            click.secho(f"Could not read prompt file {path}: {exc}", fg="yellow", err=True)
    return None


@click.command("analyze")
@click.option("--cwd", default=".", type=click.Path(exists=True, file_okay=False), help="Project root to analyze.")
@click.option("--skip-dev", is_flag=True, help="Do not run the dev command (evaluate with no logs).")
@click.option("--log-file", type=click.Path(exists=True, dir_okay=False), help="Parse a saved dev log instead of running dev.")
@click.option("--command", "dev_command", default=None, help="Override the dev command (e.g. 'next').")
@click.option("--arg", "dev_args", multiple=True, help="Argument for --command; repeatable.")
@click.option("--timeout", type=float, default=None, help="Stop the dev process after N seconds.")
@click.option("--json/--no-json", "json_report", default=True, help="Write the JSON report.")
@click.option("--json-path", default=None, help="JSON report path (relative to --cwd).")
@click.option("--markdown/--no-markdown", "markdown_report", default=True, help="Write the Markdown report.")
@click.option("--markdown-path", default=None, help="Markdown report path.")
@click.option("--text", "text_report", is_flag=True, help="Write the plain-text report.")
@click.option("--text-path", default=None, help="Text report path.")
@click.option("--include-config", is_flag=True, help="Include config file contents in reports.")
@click.option("--include-related", is_flag=True, help="Include files referenced by issues.")
@click.option("--include-raw-logs", is_flag=True, help="Embed raw log lines in the JSON report.")
@click.option("--prompt", "prompt_text", default=None, help="Extra instructions for the LLM.")
@click.option("--prompt-file", default=None, help="Read extra LLM instructions from a file.")
@click.option("--llm-model", default=None, help="LLM model (default gpt-4o-mini).")
@click.option("--llm-endpoint", default=None, help="Chat-completions endpoint URL.")
@click.option("--llm-api-key", default=None, help="API key (or set OPENAI_API_KEY env var).")
@click.option("--no-llm", is_flag=True, help="Skip the LLM insight step.")
@click.option("--verbose", is_flag=True, help="Detailed lists in the text report.")
def analyze_cmd(
    cwd: str,
    skip_dev: bool,
    log_file: str | None,
    dev_command: str | None,
    dev_args: tuple[str, ...],
    timeout: float | None,
    json_report: bool,
    json_path: str | None,
    markdown_report: bool,
    markdown_path: str | None,
    text_report: bool,
    text_path: str | None,
    include_config: bool,
    include_related: bool,
    include_raw_logs: bool,
    prompt_text: str | None,
    prompt_file: str | None,
    llm_model: str | None,
    llm_endpoint: str | None,
    llm_api_key: str | None,
    no_llm: bool,
    verbose: bool,
) -> None:
    """Run the dev server, classify its output and write reports.

    \b
    Examples:
        dev-analyzer analyze
        dev-analyzer analyze --cwd ./web --text --no-llm
        dev-analyzer analyze --log-file dev.log --prompt "Focus on HMR"
    """
    from devanalyzer.cli import get_api_key

    root = Path(cwd).resolve()
    click.echo(f"Working directory: {root}")

    try:
        config = load_config(root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager = detect_manager(root)
    framework = manager.framework.name
    click.echo(f"Package manager: {manager.package_manager}, framework: {framework}")

    # ── Collect ──────────────────────────────────────────────────────────
    stream = get_parser(framework).stream(framework)
    if log_file:
        stream.feed_all(read_log_file(log_file))
        click.echo(f"Read {len(stream.result().raw_logs)} line(s) from {log_file}.")
    elif skip_dev:
        click.echo("Skipped dev log collection.")
    else:
        click.echo("Running dev command and collecting logs (Ctrl+C to stop)...")
        try:
            dev = run_dev_with_logs(
                root,
                manager_result=manager,
                command=dev_command,
                args=list(dev_args),
                on_log=stream.feed,
                timeout=timeout,
            )
        except CollectorError as exc:
            click.secho(f"Dev command failed: {exc}", fg="red", err=True)
            click.secho("Continuing without dev logs.", fg="yellow", err=True)
        else:
            if dev.exit_code not in (0, None) and not (dev.interrupted or dev.timed_out):
                click.secho(f"Dev command exited with code {dev.exit_code}", fg="yellow", err=True)
            click.echo(f"Collected {len(dev.logs)} log line(s).")

    transform = stream.result()

    # ── Evaluate ─────────────────────────────────────────────────────────
    context = load_evaluation_context(
        transform,
        cwd=root,
        custom_prompt=load_prompt(prompt_text, prompt_file, root),
        include_configs=config.extra_configs,
    )

    llm = replace(
        config.llm,
        model=llm_model or config.llm.model,
        endpoint=llm_endpoint or config.llm.endpoint,
        api_key=get_api_key(llm_api_key, config.llm.api_key) or "",
        enabled=config.llm.enabled and not no_llm,
    )
    if llm.enabled and not llm.api_key:
        click.secho(
            "No LLM API key found (pass --llm-api-key or set OPENAI_API_KEY); "
            "skipping LLM insights.",
            fg="yellow",
            err=True,
        )

    if llm.is_configured:
        click.echo(f"Requesting LLM insights from {llm.model}...")
    result = evaluate(context, thresholds=config.thresholds, llm=llm)

    # ── Report ───────────────────────────────────────────────────────────
    if not (json_report or markdown_report or text_report):
        markdown_report = True

    outputs: list[Path] = []
    if json_report:
        outputs.append(write_json_report(
            result,
            output_path=json_path,
            include_config_files=include_config,
            include_related_files=include_related,
            include_raw_logs=include_raw_logs,
        ))
    if markdown_report:
        outputs.append(write_markdown_report(
            result,
            output_path=markdown_path,
            include_config=include_config,
            include_related=include_related,
        ))
    if text_report:
        outputs.append(write_text_report(result, output_path=text_path, verbose=verbose))

    click.echo(result.summary)
    click.echo("Reports written:")
    for path in outputs:
        click.echo(f"  - {path}")
