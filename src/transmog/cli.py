"""
Command-line interface for transmog.
Lowers a Python function from a file or module and prints its Cascade AST.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from transmog.env import env
from transmog.errors import TransmogrifyError
from transmog.function import transmogrify
from transmog.operators import Fixity, classify
from transmog.serializer import to_json

cli = typer.Typer(
	name="transmog",
	help="Lower Python functions into Cascade ASTs for remote execution",
	no_args_is_help=True,
)

logger = logging.getLogger(__name__)


def load_target(target: str) -> Any:
	"""Load 'path/to/file.py:function' or 'package.module:function'."""
	location, sep, attr = target.rpartition(":")
	if not sep or not location or not attr:
		raise typer.BadParameter(
			f"Target must look like 'path/to/file.py:function' or 'module:function', got {target!r}"
		)

	path = Path(location)
	if path.suffix == ".py":
		if not path.exists():
			raise typer.BadParameter(f"File not found: {path}")
		module_name = path.stem
		spec = importlib.util.spec_from_file_location(module_name, path.resolve())
		if spec is None or spec.loader is None:
			raise typer.BadParameter(f"Cannot import {path}")
		module = importlib.util.module_from_spec(spec)
		sys.path.insert(0, str(path.resolve().parent))
		sys.modules[module_name] = module
		spec.loader.exec_module(module)
	else:
		module = importlib.import_module(location)

	try:
		return getattr(module, attr)
	except AttributeError:
		raise typer.BadParameter(f"'{location}' has no attribute '{attr}'") from None


@cli.command("lower")
def lower(
	target: str = typer.Argument(
		..., help="Function to lower: 'path/to/file.py:func' or 'module.path:func'"
	),
	name: str | None = typer.Option(None, "--name", help="Alias for the function"),
	indent: int | None = typer.Option(None, "--indent", help="JSON indentation"),
	max_depth: int | None = typer.Option(
		None, "--max-depth", help="Nesting limit (default: TRANSMOG_MAX_DEPTH)"
	),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
	"""Print the Cascade AST of a user-defined function as JSON."""
	logging.basicConfig(level=logging.DEBUG if verbose else env.log_level)
	console = Console(stderr=True)

	fn = load_target(target)
	try:
		program = transmogrify(fn, name, max_depth=max_depth)
	except TransmogrifyError as exc:
		console.print(f"[red]❌ {type(exc).__name__}:[/red] {exc}", highlight=False)
		raise typer.Exit(1) from None

	typer.echo(to_json(program, indent=indent))


@cli.command("classify")
def classify_cmd(
	token: str = typer.Argument(..., help="Operator token, e.g. '+', 'log', 'is.na'"),
	nargs: int | None = typer.Option(None, "--nargs", help="Operand count"),
):
	"""Print the fixity of an operator token."""
	fixity = classify(token, nargs)
	if fixity is Fixity.UNKNOWN:
		Console(stderr=True).print(f"[red]❌ Unknown operator:[/red] {token}", highlight=False)
		raise typer.Exit(1)
	typer.echo(fixity.value)


def main() -> None:
	cli()


if __name__ == "__main__":
	main()
