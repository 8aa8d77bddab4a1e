"""Load a store, run one command against it, save it if it changed."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TypeVar

import typer
from pydantic import BaseModel

from .errors import Cancelled, LoadError, ParseError, RecordStoreError, SaveError
from .manager import RecordManager
from .storage import load_records

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=RecordManager)


@dataclass
class CliState:
    """Options shared by every subcommand of a tool."""

    path: Path
    selection: Optional[list[int]] = None


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def load_store(path: Path, model: type[BaseModel], factory: Callable[[list], S]) -> S:
    try:
        records = load_records(path, model)
    except (LoadError, ParseError) as e:
        fail(str(e))

    try:
        return factory(records)
    except RecordStoreError as e:
        fail(str(e))


@contextmanager
def open_store(
    path: Path, model: type[BaseModel], factory: Callable[[list], S]
) -> Iterator[S]:
    """Yield a store for `path` and save it on the way out.

    Changes are written even when the command fails part-way, so whatever
    succeeded before the failure is kept. Store errors become exit status 1
    with a message; a cancelled prompt exits 1 silently.
    """
    store = load_store(path, model, factory)
    try:
        yield store
    except Cancelled:
        raise typer.Exit(1)
    except RecordStoreError as e:
        fail(str(e))
    finally:
        try:
            if store.save_if_modified(path):
                logger.debug("Saved %s", path)
        except SaveError as e:
            fail(str(e))
