"""
Keyguard CLI
=============

Click-based command-line interface for the Keyguard password analysis
engine. Provides subcommands for password analysis, rewriting a weak
password, passphrase generation, the security chat assistant and the
remote analysis history.

Usage::

    python -m keyguard analyze "Tr0ub4dor&3"
    python -m keyguard analyze                 # prompts without echo
    python -m keyguard enhance "password1" --score 0
    python -m keyguard passphrase --words 5 --count 3
    python -m keyguard passphrase --memorable
    python -m keyguard chat "Is a 12 character password enough?"
    python -m keyguard history list

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import asyncio
import json
import random
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import click

from shared.config import KeyguardConfig
from shared.console import KeyguardConsole
from shared.network import KeyguardHTTPError

from keyguard import __version__
from keyguard.core.engine import KeyguardEngine
from keyguard.core.errors import KeyguardError
from keyguard.output.console import KeyguardConsoleOutput
from keyguard.output.report import KeyguardReportGenerator


# ===================================================================== #
#  Async Runner Helper
# ===================================================================== #

def _run_async(coro):
    """Run an async coroutine from synchronous Click handlers."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            future = pool.submit(asyncio.run, coro)
            return future.result()
    return asyncio.run(coro)


@contextmanager
def _reported_errors(ctx: click.Context) -> Iterator[None]:
    """Turn Keyguard and collaborator failures into a one-line error and exit 1."""
    try:
        yield
    except (KeyguardError, KeyguardHTTPError) as exc:
        console: KeyguardConsole = ctx.obj["console"]
        if ctx.obj["quiet"]:
            click.echo(f"Error: {exc}", err=True)
        else:
            console.error(str(exc))
        ctx.exit(1)


# ===================================================================== #
#  CLI Group
# ===================================================================== #

@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to Keyguard configuration file (TOML).",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["console", "json", "html"]),
    default="console",
    help="Output format.",
)
@click.option(
    "--output-file", "-f",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file path (for JSON/HTML output).",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Suppress banner and informational output.",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed the random source for reproducible rewrites and passphrases.",
)
@click.version_option(__version__, prog_name="keyguard")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[str],
    output: str,
    output_file: Optional[str],
    quiet: bool,
    seed: Optional[int],
) -> None:
    """Keyguard -- Password Analysis Engine.

    Grade password strength, estimate crack times, detect weak patterns,
    rewrite weak passwords and generate passphrases.
    """
    ctx.ensure_object(dict)

    keyguard_config = KeyguardConfig.load(config) if config else KeyguardConfig()
    ctx.obj["config"] = keyguard_config
    ctx.obj["output_format"] = output
    ctx.obj["output_file"] = output_file
    ctx.obj["quiet"] = quiet

    console = KeyguardConsole(quiet=quiet)
    rng = random.Random(seed) if seed is not None else None
    ctx.obj["console"] = console
    ctx.obj["engine"] = KeyguardEngine(keyguard_config, rng=rng)
    ctx.obj["display"] = KeyguardConsoleOutput(console)
    ctx.obj["reporter"] = KeyguardReportGenerator()

    if not quiet and output == "console":
        console.banner(version=__version__)


def _echo_json(ctx: click.Context, payload: Any) -> None:
    """Print *payload* as JSON, or write it to ``--output-file``."""
    content = json.dumps(payload, indent=2, ensure_ascii=False, allow_nan=False, default=str)
    output_file = ctx.obj["output_file"]
    if output_file:
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        ctx.obj["console"].success(f"JSON saved to: {path}")
    else:
        click.echo(content)


# ===================================================================== #
#  Subcommands
# ===================================================================== #

@cli.command()
@click.argument("password", required=False)
@click.pass_context
def analyze(ctx: click.Context, password: Optional[str]) -> None:
    """Analyse password strength.

    Computes entropy, detects weak patterns, estimates crack times and
    suggests improvements. Omit PASSWORD to be prompted for it without
    echo (keeps it out of shell history).
    """
    if password is None:
        password = click.prompt("Password", hide_input=True, default="", show_default=False)

    engine: KeyguardEngine = ctx.obj["engine"]
    display: KeyguardConsoleOutput = ctx.obj["display"]
    reporter: KeyguardReportGenerator = ctx.obj["reporter"]
    console: KeyguardConsole = ctx.obj["console"]
    output_format = ctx.obj["output_format"]
    output_file = ctx.obj["output_file"]

    with _reported_errors(ctx):
        analysis = engine.analyze(password)

    if output_format == "console":
        display.display_analysis(analysis)
    elif output_format == "json":
        if output_file:
            reporter.generate_json(analysis, Path(output_file))
            console.success(f"JSON report saved to: {output_file}")
        else:
            click.echo(reporter.generate_json(analysis))
    else:
        path = Path(output_file or "keyguard_report.html")
        reporter.generate_html(analysis, path)
        console.success(f"HTML report saved to: {path}")


@cli.command()
@click.argument("password")
@click.option(
    "--score", "-s",
    type=click.IntRange(0, 4),
    default=None,
    help="Current strength score (0-4). Computed by analysis when omitted.",
)
@click.pass_context
def enhance(ctx: click.Context, password: str, score: Optional[int]) -> None:
    """Rewrite PASSWORD into a stronger variant.

    Replaces common words, swaps letters for look-alike symbols, and
    adds missing character classes and length.
    """
    engine: KeyguardEngine = ctx.obj["engine"]

    with _reported_errors(ctx):
        if score is None:
            score = engine.analyze(password).score
        result = engine.enhance(password, score)

    if ctx.obj["output_format"] == "console":
        ctx.obj["display"].display_enhancement(result)
    else:
        _echo_json(ctx, result.model_dump(mode="json", by_alias=True))


@cli.command()
@click.option(
    "--words", "-w",
    type=click.IntRange(2, 12),
    default=4,
    show_default=True,
    help="Number of words.",
)
@click.option("--number/--no-number", default=True, help="Append a random number.")
@click.option("--special/--no-special", default=True, help="Append a random symbol.")
@click.option(
    "--capitalize/--no-capitalize", default=True, help="Capitalise each word."
)
@click.option(
    "--count", "-n",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="How many passphrases to generate.",
)
@click.option(
    "--memorable", is_flag=True, default=False,
    help="Generate passphrases with a mnemonic hint instead.",
)
@click.pass_context
def passphrase(
    ctx: click.Context,
    words: int,
    number: bool,
    special: bool,
    capitalize: bool,
    count: int,
    memorable: bool,
) -> None:
    """Generate random word passphrases."""
    engine: KeyguardEngine = ctx.obj["engine"]
    display: KeyguardConsoleOutput = ctx.obj["display"]
    as_console = ctx.obj["output_format"] == "console"

    with _reported_errors(ctx):
        if memorable:
            items = engine.memorable_passphrases(count)
            if as_console:
                display.display_memorable(items)
            else:
                _echo_json(ctx, [i.model_dump(mode="json", by_alias=True) for i in items])
            return

        phrases = engine.passphrases(
            count=count,
            word_count=words,
            add_number=number,
            add_special=special,
            capitalize_words=capitalize,
        )

    if as_console:
        display.display_passphrases(phrases)
    else:
        _echo_json(ctx, phrases)


@cli.command()
@click.argument("message")
@click.option(
    "--password", "-p",
    default=None,
    help="Analyse this password and share the summary with the assistant.",
)
@click.pass_context
def chat(ctx: click.Context, message: str, password: Optional[str]) -> None:
    """Ask the password security assistant MESSAGE.

    The assistant only ever sees an analysis summary, never the password.
    """
    engine: KeyguardEngine = ctx.obj["engine"]
    console: KeyguardConsole = ctx.obj["console"]

    with _reported_errors(ctx):
        analysis = engine.analyze(password) if password is not None else None
        with console.status("Contacting assistant..."):
            reply = _run_async(engine.chat(message, analysis))

    if ctx.obj["output_format"] == "console":
        ctx.obj["display"].display_chat_reply(reply)
    else:
        _echo_json(ctx, {"response": reply})


# ===================================================================== #
#  History Subcommands
# ===================================================================== #

@cli.group()
def history() -> None:
    """Save, list and delete stored analyses."""


@history.command("save")
@click.argument("password", required=False)
@click.pass_context
def history_save(ctx: click.Context, password: Optional[str]) -> None:
    """Analyse PASSWORD and store the result (hashed) in the history table."""
    if password is None:
        password = click.prompt("Password", hide_input=True)

    engine: KeyguardEngine = ctx.obj["engine"]
    with _reported_errors(ctx):
        analysis = engine.analyze(password)
        record = _run_async(engine.save_history(analysis, password))

    if ctx.obj["output_format"] == "console":
        ctx.obj["console"].success(
            f"Saved analysis {record.id if record.id is not None else ''} "
            f"(score {record.score}/4)"
        )
    else:
        _echo_json(ctx, record.model_dump(mode="json"))


@history.command("list")
@click.pass_context
def history_list(ctx: click.Context) -> None:
    """Show stored analyses, newest first."""
    engine: KeyguardEngine = ctx.obj["engine"]
    with _reported_errors(ctx):
        records = _run_async(engine.list_history())

    if ctx.obj["output_format"] == "console":
        ctx.obj["display"].display_history(records)
    else:
        _echo_json(ctx, [r.model_dump(mode="json") for r in records])


@history.command("delete")
@click.argument("record_id")
@click.pass_context
def history_delete(ctx: click.Context, record_id: str) -> None:
    """Delete the stored analysis RECORD_ID."""
    engine: KeyguardEngine = ctx.obj["engine"]
    with _reported_errors(ctx):
        _run_async(engine.delete_history(record_id))
    ctx.obj["console"].success(f"Deleted history record {record_id}")


# ===================================================================== #
#  Entry Point
# ===================================================================== #

def main() -> None:
    """Main entry point for the Keyguard CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
