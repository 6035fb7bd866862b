"""Invoke tasks for smartorg development.

Every task shells out to `uv` so the virtual environment stays the single
source of installed tooling.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"


def _uv(ctx: Context, args: Sequence[str], *, pty: bool = True) -> None:
    """Run ``uv`` with ``args`` from the project root.

    Args:
        ctx: Invoke execution context.
        args: Arguments appended after the `uv` executable.
        pty: Allocate a pseudo-terminal so rich keeps its colours.
    """
    with ctx.cd(str(PROJECT_ROOT)):
        ctx.run(shlex.join(("uv", *args)), echo=True, pty=pty)


@task(help={"dev": "Install the dev extra (pytest, ruff, invoke)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Synchronize the virtual environment."""
    args = ["sync"]
    if dev:
        args.extend(["--extra", "dev"])
    _uv(ctx, args)


@task(help={"clean": "Empty dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into dist/."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression.",
        "path": "Test path (defaults to tests/).",
        "options": "Extra flags forwarded to pytest.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite.

    Args:
        ctx: Invoke execution context.
        k: Selection expression passed as ``-k``.
        path: File or directory to collect from.
        options: Additional pytest arguments, split with shell rules.
    """
    args = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    args.extend(shlex.split(options))
    args.append(path)
    _uv(ctx, args)


@task(help={"fix": "Let ruff apply safe fixes.", "check_format": "Also run ruff format --check."})
def lint(ctx: Context, fix: bool = False, check_format: bool = False) -> None:
    """Lint src/ and tests/ with ruff."""
    if check_format:
        _uv(ctx, ["run", "ruff", "format", "--check", "src", "tests"])
    args = ["run", "ruff", "check", "src", "tests"]
    if fix:
        args.append("--fix")
    _uv(ctx, args)


@task(help={"path": "Directory to organize once; defaults to the watched directories."})
def organize(ctx: Context, path: str = "") -> None:
    """Run a single organize pass through the installed CLI."""
    args = ["run", "smartorg", "run"]
    if path:
        args.append(path)
    _uv(ctx, args)


@task
def ci(ctx: Context) -> None:
    """Run the checks CI runs."""
    ctx.invoke(lint, check_format=True)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, organize, ci)
