"""Redline CLI entry point."""

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click

from redline import __version__
from redline.core.config import Config, ConfigError, load_config, merge_cli_args, parse_risk
from redline.core.review import (
    ReviewState,
    add_comment,
    approve_all,
    approve_hunk,
    approve_selected,
    delete_comment,
    reject_all,
    reject_hunk,
    reject_selected,
    toggle_file_selection,
)
from redline.core.store import ReviewStore, StoreError
from redline.diff.parser import MalformedPatch, parse_patch_file
from redline.diff.summary import summarize
from redline.diff.types import FileDiff
from redline.output import get_formatter
from redline.output.text import TextFormatter

EXIT_FAIL_ON = 1
EXIT_USAGE = 2
EXIT_ERROR = 3

FORMATS = ["text", "json", "markdown"]
RISKS = ["low", "medium", "high"]


class EchoSink:
    """Approval sink reporting each decision on the terminal."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet
        self.accepted: list[str] = []
        self.rejected: list[str] = []

    def accept(self, file_key: str) -> None:
        self.accepted.append(file_key)
        if not self.quiet:
            click.echo(f"Approved {file_key}")

    def reject(self, file_key: str) -> None:
        self.rejected.append(file_key)
        if not self.quiet:
            click.echo(f"Rejected {file_key}")


class Context:
    """Settings shared by all commands."""

    def __init__(self, config: Config, verbose: bool, quiet: bool) -> None:
        self.config = config
        self.verbose = verbose
        self.quiet = quiet

    @property
    def store(self) -> ReviewStore:
        return ReviewStore(self.config.state_file)

    def log(self, message: str) -> None:
        """Progress message on stderr unless quiet."""
        if not self.quiet:
            click.echo(message, err=True)


pass_context = click.make_pass_decorator(Context)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(message: str, code: int) -> NoReturn:
    click.echo(message, err=True)
    sys.exit(code)


def _load_patch(path: str) -> list[FileDiff]:
    try:
        return parse_patch_file(path)
    except MalformedPatch as e:
        _fail(f"Malformed patch: {e}", EXIT_ERROR)
    except FileNotFoundError as e:
        _fail(str(e), EXIT_ERROR)


def _load_state(ctx: Context) -> ReviewState:
    store = ctx.store
    if not store.exists():
        _fail(
            f"No review in progress ({store.path}). Start one with 'redline review PATCH'.",
            EXIT_USAGE,
        )
    try:
        return store.load()
    except StoreError as e:
        _fail(f"Review state error: {e}", EXIT_ERROR)


def _save_state(ctx: Context, state: ReviewState) -> None:
    try:
        ctx.store.save(state)
    except StoreError as e:
        _fail(f"Review state error: {e}", EXIT_ERROR)


def _emit(ctx: Context, output: str, output_file: Optional[str]) -> None:
    if output_file:
        Path(output_file).write_text(output + "\n", encoding="utf-8")
        ctx.log(f"Output written to {output_file}")
    else:
        click.echo(output)


def _render(
    ctx: Context,
    state: ReviewState,
    target: str,
    output_format: Optional[str],
    view: Optional[str],
    output_file: Optional[str],
    no_comments: bool,
) -> None:
    try:
        config = merge_cli_args(ctx.config, output_format=output_format, view=view)
    except ConfigError as e:
        _fail(f"Configuration error: {e}", EXIT_USAGE)

    if config.output_format == "text":
        formatter = get_formatter(
            "text", view=config.view, width=config.width, color=output_file is None
        )
    else:
        formatter = get_formatter(config.output_format)

    include_comments = config.show_comments and not no_comments
    _emit(ctx, formatter.format(state, target=target, include_comments=include_comments), output_file)


@click.group()
@click.version_option(version=__version__, prog_name="redline")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Config file path (default: .redline.yaml).",
)
@click.option(
    "--state",
    "state_file",
    type=click.Path(),
    default=None,
    help="Review state file (default: .redline/review.json).",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress output.")
@click.pass_context
def cli(
    click_ctx: click.Context,
    config_path: Optional[str],
    state_file: Optional[str],
    verbose: bool,
    quiet: bool,
) -> None:
    """Redline - review machine-proposed code changes.

    Read a unified diff, browse it unified or side by side, approve or
    reject files and hunks, and attach line comments.
    """
    _configure_logging(verbose)
    try:
        config = merge_cli_args(load_config(config_path), state_file=state_file)
    except ConfigError as e:
        _fail(f"Configuration error: {e}", EXIT_USAGE)
    click_ctx.obj = Context(config, verbose=verbose, quiet=quiet)


@cli.command()
@click.argument("patch", type=click.Path(exists=True))
@click.option("--split", is_flag=True, default=False, help="Side-by-side view.")
@click.option(
    "-o",
    "--output",
    "output_format",
    type=click.Choice(FORMATS),
    default=None,
    help="Output format (default: text).",
)
@click.option(
    "-f",
    "--output-file",
    type=click.Path(),
    default=None,
    help="Write output to file (default: stdout).",
)
@pass_context
def show(
    ctx: Context,
    patch: str,
    split: bool,
    output_format: Optional[str],
    output_file: Optional[str],
) -> None:
    """Render a patch file."""
    files = _load_patch(patch)
    if ctx.verbose:
        ctx.log(f"Parsed {len(files)} file(s) from {patch}")
    view = "split" if split else None
    _render(ctx, ReviewState.from_files(files), patch, output_format, view, output_file, False)


@cli.command()
@click.argument("patch", type=click.Path(exists=True))
@click.option(
    "-o",
    "--output",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--fail-on",
    type=click.Choice(RISKS),
    default=None,
    help="Exit non-zero if the risk is at this level or above.",
)
@pass_context
def summary(ctx: Context, patch: str, output_format: str, fail_on: Optional[str]) -> None:
    """Summarize a patch and triage its risk."""
    result = summarize(_load_patch(patch))

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(TextFormatter(color=False).format_summary(result))

    threshold = parse_risk(fail_on) if fail_on else ctx.config.fail_on
    if threshold is not None and result.risk >= threshold:
        sys.exit(EXIT_FAIL_ON)


@cli.command()
@click.argument("patch", type=click.Path(exists=True))
@click.option("--force", is_flag=True, help="Discard the review in progress.")
@pass_context
def review(ctx: Context, patch: str, force: bool) -> None:
    """Start reviewing a patch."""
    store = ctx.store
    if store.exists() and not force:
        _fail(f"A review is already in progress ({store.path}). Use --force to restart.", EXIT_USAGE)

    files = _load_patch(patch)
    _save_state(ctx, ReviewState.from_files(files))
    ctx.log(f"Reviewing {len(files)} file(s) from {patch}; state in {store.path}")


def _decide(
    ctx: Context,
    keys: tuple[str, ...],
    hunk: Optional[str],
    select_all: bool,
    approve: bool,
) -> None:
    state = _load_state(ctx)
    sink = EchoSink(quiet=ctx.quiet)

    if select_all:
        state = approve_all(state, None, sink) if approve else reject_all(state, None, sink)
    elif hunk is not None:
        if len(keys) != 1:
            _fail("--hunk takes exactly one FILE", EXIT_USAGE)
        file_diff = state.get_file(keys[0])
        if file_diff is None or file_diff.get_hunk(hunk) is None:
            _fail(f"Unknown hunk {hunk} in {keys[0]}", EXIT_USAGE)
        state = approve_hunk(state, keys[0], hunk) if approve else reject_hunk(state, keys[0], hunk)
        ctx.log(f"{'Approved' if approve else 'Rejected'} hunk {hunk} of {keys[0]}")
    else:
        if not keys:
            _fail("Give at least one FILE, or --all", EXIT_USAGE)
        for key in keys:
            if state.get_file(key) is None:
                _fail(f"Unknown file {key}", EXIT_USAGE)
            if not state.is_selected(key):
                state = toggle_file_selection(state, key)
        state = approve_selected(state, sink) if approve else reject_selected(state, sink)

    _save_state(ctx, state)


@cli.command()
@click.argument("keys", nargs=-1)
@click.option("--hunk", default=None, help="Approve a single hunk of FILE.")
@click.option("--all", "select_all", is_flag=True, help="Approve every file.")
@pass_context
def approve(ctx: Context, keys: tuple[str, ...], hunk: Optional[str], select_all: bool) -> None:
    """Approve files (or one hunk) of the review."""
    _decide(ctx, keys, hunk, select_all, approve=True)


@cli.command()
@click.argument("keys", nargs=-1)
@click.option("--hunk", default=None, help="Reject a single hunk of FILE.")
@click.option("--all", "select_all", is_flag=True, help="Reject every file.")
@pass_context
def reject(ctx: Context, keys: tuple[str, ...], hunk: Optional[str], select_all: bool) -> None:
    """Reject files (or one hunk) of the review."""
    _decide(ctx, keys, hunk, select_all, approve=False)


@cli.command()
@click.argument("key")
@click.argument("line", type=int)
@click.argument("text")
@click.option("--hunk", default=None, help="Hunk id the line belongs to.")
@click.option("--author", default=None, help="Comment author (default: from config).")
@pass_context
def comment(
    ctx: Context,
    key: str,
    line: int,
    text: str,
    hunk: Optional[str],
    author: Optional[str],
) -> None:
    """Comment on LINE of file KEY."""
    state = _load_state(ctx)
    file_diff = state.get_file(key)
    if file_diff is None:
        _fail(f"Unknown file {key}", EXIT_USAGE)
    if not text.strip():
        _fail("Comment text must not be empty", EXIT_USAGE)

    before = {c.id for c in file_diff.comments}
    state = add_comment(state, key, line, text, hunk_id=hunk, author=author or ctx.config.author)
    _save_state(ctx, state)

    updated = state.get_file(key)
    assert updated is not None
    for new in updated.comments:
        if new.id not in before:
            click.echo(new.id)


@cli.command()
@click.argument("key")
@click.argument("comment_id")
@pass_context
def uncomment(ctx: Context, key: str, comment_id: str) -> None:
    """Delete comment COMMENT_ID from file KEY."""
    state = _load_state(ctx)
    _save_state(ctx, delete_comment(state, key, comment_id))
    ctx.log(f"Deleted {comment_id}")


@cli.command()
@click.option("--split", is_flag=True, default=False, help="Side-by-side view.")
@click.option(
    "-o",
    "--output",
    "output_format",
    type=click.Choice(FORMATS),
    default=None,
    help="Output format (default: text).",
)
@click.option(
    "-f",
    "--output-file",
    type=click.Path(),
    default=None,
    help="Write output to file (default: stdout).",
)
@click.option("--no-comments", is_flag=True, default=False, help="Omit comment threads.")
@pass_context
def report(
    ctx: Context,
    split: bool,
    output_format: Optional[str],
    output_file: Optional[str],
    no_comments: bool,
) -> None:
    """Render the review in progress."""
    state = _load_state(ctx)
    view = "split" if split else None
    _render(ctx, state, str(ctx.store.path), output_format, view, output_file, no_comments)


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing config file.",
)
def init(force: bool) -> None:
    """Create .redline.yaml config file."""
    config_path = Path(".redline.yaml")

    if config_path.exists() and not force:
        _fail("Config file already exists. Use --force to overwrite.", EXIT_USAGE)

    default_config = """\
# Redline configuration

review:
  # author: your-name   # Recorded on new comments
  state_file: .redline/review.json

display:
  view: unified         # unified | split
  width: 160
  show_comments: true

settings:
  output_format: text   # text | json | markdown
  # fail_on: high       # Uncomment to fail CI at this risk level or above
"""
    config_path.write_text(default_config)
    click.echo(f"Created {config_path}")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
