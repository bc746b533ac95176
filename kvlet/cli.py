"""kvlet CLI entrypoint.

Maps the command surface onto ``Repository`` operations and renders
log and status text.
"""

from __future__ import annotations

import functools
import logging
from datetime import datetime

import click

from . import __version__
from .errors import KvletError
from .models import Commit
from .repository import Repository, StatusReport, init, open_repo


class KvletCliError(click.ClickException):
    """A repository error, shown as its bare message."""

    def show(self, file=None) -> None:
        click.echo(self.format_message(), file=file)


def handle_errors(func):
    """Turn ``KvletError`` into a CLI error with exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KvletError as e:
            raise KvletCliError(e.message) from e

    return wrapper


def _repo(ctx: click.Context) -> Repository:
    return open_repo(ctx.obj["path"])


def format_date(timestamp: float) -> str:
    dt = datetime.fromtimestamp(timestamp).astimezone()
    return f"{dt:%a %b} {dt.day} {dt:%H:%M:%S %Y %z}"


def format_commit(commit: Commit) -> str:
    lines = ["===", f"commit {commit.id}"]
    if commit.is_merge:
        first, second = commit.parents
        lines.append(f"Merge: {first[:7]} {second[:7]}")
    lines.append(f"Date: {format_date(commit.timestamp)}")
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


def format_status(report: StatusReport) -> str:
    branches = [
        f"*{name}" if name == report.active else name for name in report.branches
    ]
    sections = [
        ("Branches", branches),
        ("Staged Files", report.staged),
        ("Removed Files", report.removed),
        ("Modifications Not Staged For Commit", report.modified),
        ("Untracked Files", report.untracked),
    ]
    return "\n".join(
        "\n".join([f"=== {title} ===", *entries, ""]) for title, entries in sections
    )


class CheckoutCommand(click.Command):
    """Remembers whether ``--`` was given; click drops it while parsing."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta["kvlet.file_form"] = "--" in args
        return super().parse_args(ctx, args)


@click.group()
@click.version_option(version=__version__, prog_name="kvlet")
@click.option(
    "--repo",
    "-C",
    "path",
    default=".",
    type=click.Path(file_okay=False),
    help="Working directory of the repository.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, path: str, verbose: bool) -> None:
    """kvlet - a tiny version-control system for a flat directory."""
    ctx.ensure_object(dict)
    ctx.obj["path"] = path
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )


@cli.command("init")
@click.pass_context
@handle_errors
def init_cmd(ctx: click.Context) -> None:
    """Create a repository in the working directory."""
    init(ctx.obj["path"]).close()


@cli.command()
@click.argument("filename")
@click.pass_context
@handle_errors
def add(ctx: click.Context, filename: str) -> None:
    """Stage a file for the next commit."""
    with _repo(ctx) as repo:
        repo.add(filename)


@cli.command()
@click.argument("message", required=False, default="")
@click.pass_context
@handle_errors
def commit(ctx: click.Context, message: str) -> None:
    """Record the staged changes."""
    with _repo(ctx) as repo:
        repo.commit(message)


@cli.command()
@click.argument("filename")
@click.pass_context
@handle_errors
def rm(ctx: click.Context, filename: str) -> None:
    """Unstage a file, or stage its removal."""
    with _repo(ctx) as repo:
        repo.rm(filename)


@cli.command()
@click.pass_context
@handle_errors
def log(ctx: click.Context) -> None:
    """Show first-parent history of HEAD."""
    with _repo(ctx) as repo:
        for entry in repo.log():
            click.echo(format_commit(entry))


@cli.command("global-log")
@click.pass_context
@handle_errors
def global_log(ctx: click.Context) -> None:
    """Show every commit ever made."""
    with _repo(ctx) as repo:
        for entry in repo.global_log():
            click.echo(format_commit(entry))


@cli.command()
@click.argument("message")
@click.pass_context
@handle_errors
def find(ctx: click.Context, message: str) -> None:
    """Print the ids of commits with the given message."""
    with _repo(ctx) as repo:
        ids = repo.find(message)
    if not ids:
        raise KvletCliError("Found no commit with that message.")
    for commit_id in ids:
        click.echo(commit_id)


@cli.command()
@click.pass_context
@handle_errors
def status(ctx: click.Context) -> None:
    """Show branches, staged changes and untracked files."""
    with _repo(ctx) as repo:
        report = repo.status()
    click.echo(format_status(report))


@cli.command(cls=CheckoutCommand)
@click.argument("operands", nargs=-1, required=True)
@click.pass_context
@handle_errors
def checkout(ctx: click.Context, operands: tuple[str, ...]) -> None:
    """checkout BRANCH | checkout -- FILE | checkout COMMIT -- FILE"""
    file_form = ctx.meta.get("kvlet.file_form", False)
    if len(operands) > (2 if file_form else 1):
        raise click.UsageError("Incorrect operands.")
    with _repo(ctx) as repo:
        if not file_form:
            repo.checkout_branch(operands[0])
        elif len(operands) == 1:
            repo.checkout_file(operands[0])
        else:
            repo.checkout_file(operands[1], operands[0])


@cli.command()
@click.argument("name")
@click.pass_context
@handle_errors
def branch(ctx: click.Context, name: str) -> None:
    """Create a branch at HEAD."""
    with _repo(ctx) as repo:
        repo.branch(name)


@cli.command("rm-branch")
@click.argument("name")
@click.pass_context
@handle_errors
def rm_branch(ctx: click.Context, name: str) -> None:
    """Delete a branch pointer."""
    with _repo(ctx) as repo:
        repo.rm_branch(name)


@cli.command()
@click.argument("commit_id")
@click.pass_context
@handle_errors
def reset(ctx: click.Context, commit_id: str) -> None:
    """Check out a commit and move the current branch to it."""
    with _repo(ctx) as repo:
        repo.reset(commit_id)


@cli.command()
@click.argument("name")
@click.pass_context
@handle_errors
def merge(ctx: click.Context, name: str) -> None:
    """Merge a branch into the current branch."""
    with _repo(ctx) as repo:
        result = repo.merge(name)
    if result.message:
        click.echo(result.message)


def main() -> None:
    """Main entrypoint for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
