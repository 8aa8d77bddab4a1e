"""CLI for the bookmark list (bkmk).

Keeps a flat list of links in a JSON file. Add links by URL, browse them
with a fuzzy picker, and open, copy, archive or delete the chosen one.
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import external
from .bookmarks import BookmarkStore
from .config import get_bookmark_path, setup_logging
from .errors import RecordStoreError
from .models import Bookmark
from .session import CliState, fail, open_store

MAIN_HELP = """
Bookmark manager. Store links in a JSON file and pick them with fzf/rofi.

QUICK START:
  bkmk add https://example.com                 Title fetched from the page
  bkmk add https://example.com -t "Example"    Explicit title
  bkmk add-from-file urls.txt                  One URL per line
  bkmk menu                                    Pick a bookmark, then an action
  bkmk list --json                             Dump bookmarks

DATA FILE:
  --path PATH > $BKMK_FILE > $XDG_DATA_HOME/bkmk > ~/.local/share/bkmk
"""

app = typer.Typer(
    name="bkmk",
    help=MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)

console = Console()

PathOption = Annotated[
    Optional[str],
    typer.Option(
        "--path", "-p",
        help="The path to the bookmarks file (default: $BKMK_FILE => ~/.local/share/bkmk).",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Print debug logging to stderr."),
]

# The picker shows "<index> <action>"; the index is what gets parsed back.
MENU_ACTIONS = [
    "open (via $OPENER -> xdg-open)",
    "archive",
    "copy (via xclip)",
    "delete",
]


@app.callback()
def main(
    ctx: typer.Context,
    path: PathOption = None,
    verbose: VerboseOption = False,
) -> None:
    setup_logging(verbose)
    ctx.obj = CliState(path=get_bookmark_path(path))


def _open(ctx: typer.Context):
    return open_store(ctx.obj.path, Bookmark, BookmarkStore)


def _first_index(line: str) -> int:
    token = line.strip().split(" ", 1)[0]
    try:
        return int(token)
    except ValueError:
        raise RecordStoreError(f"unexpected picker output: {line!r}") from None


ADD_HELP = """
Add a bookmark.

Without --title the page is downloaded and its <title> used; if that fails
you are asked to type a title.

EXAMPLES:
  bkmk add https://docs.python.org/3/
  bkmk add https://example.com --title "Example"
"""


@app.command(help=ADD_HELP)
def add(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="The URL to bookmark.")],
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Title to use instead of the page's."),
    ] = None,
) -> None:
    """Add a bookmark."""
    with _open(ctx) as store:
        if title is not None:
            bookmark = store.add_bookmark(title, url, [])
        else:
            bookmark = store.add_bookmark_from_url(url, True)
        typer.echo(f"Added bookmark #{bookmark.id}")


@app.command("add-from-file")
def add_from_file(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="File with one URL per line.")],
) -> None:
    """Add every URL listed in a file, fetching each title."""
    try:
        contents = file.read_text(encoding="utf-8")
    except OSError as e:
        fail(f"failed to read file: {e}")
    except UnicodeDecodeError:
        fail(f"failed to read file: {file} is not valid UTF-8")

    with _open(ctx) as store:
        added = store.add_from_lines(contents.split("\n"))
        typer.echo(f"Added {len(added)} bookmark{'' if len(added) == 1 else 's'}")


@app.command()
def menu(ctx: typer.Context) -> None:
    """Pick a bookmark, then open, archive, copy or delete it."""
    with _open(ctx) as store:
        candidates = store.unarchived()
        if not candidates:
            fail("There are no unarchived bookmarks to select")

        listing = "\n".join(
            f"{i:>3} {b.name:<95} ({b.url})" for i, b in enumerate(candidates)
        )
        chosen = _first_index(external.pick(f"Bookmark ({len(candidates)}):", listing))
        if not 0 <= chosen < len(candidates):
            fail(f"no bookmark at position {chosen}")
        bookmark_id = candidates[chosen].id

        listing = "\n".join(f"{i} {action}" for i, action in enumerate(MENU_ACTIONS))
        action = _first_index(external.pick("Action:", listing))

        if action == 0:
            store.interact(bookmark_id, lambda b: external.open_url(b.url))
        elif action == 1:
            store.archive(bookmark_id)
        elif action == 2:
            store.interact(bookmark_id, lambda b: external.copy_to_clipboard(b.url))
        elif action == 3:
            store.remove_bookmark(bookmark_id)
        else:
            fail(f"unknown action: {action}")


@app.command("list")
def list_bookmarks(
    ctx: typer.Context,
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Include archived bookmarks."),
    ] = False,
    output_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON array."),
    ] = False,
) -> None:
    """List bookmarks."""
    with _open(ctx) as store:
        bookmarks = list(store.records()) if show_all else store.unarchived()

    if output_json:
        typer.echo(json.dumps([b.model_dump(mode="json") for b in bookmarks], indent=2))
        return

    if not bookmarks:
        typer.echo("No bookmarks found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="dim", width=5)
    table.add_column("Name", max_width=50)
    table.add_column("URL", style="cyan")
    table.add_column("Tags", style="green")
    if show_all:
        table.add_column("Archived", width=8)

    for b in bookmarks:
        row = [str(b.id), b.name, b.url, ", ".join(b.tags) if b.tags else "-"]
        if show_all:
            row.append("yes" if b.archived else "")
        table.add_row(*row)

    console.print(table)


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
