"""CLI for the task/note tree (itmn).

Pending items are addressed by their reference ID, the number shown in
every listing. Completing an item frees its number for the next new item.
"""

from collections.abc import Iterable
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from . import external
from .config import get_first_ref_id, get_item_path, setup_logging
from .errors import NotFound
from .items import ItemStore
from .models import Item, ItemChanges, State
from .session import CliState, fail, open_store

MAIN_HELP = """
Task and note tree. Without a command, shows the [next] report.

QUICK START:
  itmn add "Write report" -c work            New task with a context
  itmn add "Meeting notes" --note            New note
  itmn ls                                    Everything not done, as a tree
  itmn sel 3 add-child "Draft outline"       Nest a task under item 3
  itmn sel 1,4-6 mod -c home                 Change context of 1, 4, 5 and 6
  itmn sel 2 done                            Complete item 2

DATA FILE:
  --path PATH > $ITMN_FILE > $XDG_DATA_HOME/itmn > ~/.local/share/itmn
"""

SEL_HELP = """
Select items by reference ID and do something with them.

RANGE is a comma separated list of IDs and inclusive ID ranges, e.g.
`3`, `1,2,7` or `1-4,9`. Without an action the selection is shown as a tree.
"""

app = typer.Typer(
    name="itmn",
    help=MAIN_HELP,
    rich_markup_mode="markdown",
)
sel_app = typer.Typer(help=SEL_HELP)
app.add_typer(sel_app, name="sel")

console = Console()

PathOption = Annotated[
    Optional[str],
    typer.Option(
        "--path", "-p",
        help="The path to the entries file (default: $ITMN_FILE => ~/.local/share/itmn).",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Print debug logging to stderr."),
]
ContextOption = Annotated[
    Optional[str],
    typer.Option("--context", "-c", help="The context of the item."),
]
NoteOption = Annotated[
    bool,
    typer.Option("--note", "-n", help="Create a note instead of a task."),
]

STATE_MARKERS = {
    State.TODO: "[ ]",
    State.NOTE: " * ",
    State.DONE: "[x]",
}

# Widest ID range `sel` accepts; selections are expanded eagerly.
MAX_RANGE_SPAN = 10_000


def parse_range(value: str) -> list[int]:
    """Parse `1,3,5-7` into [1, 3, 5, 6, 7], keeping order and dropping repeats."""
    ids: list[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        start, sep, end = part.partition("-")
        try:
            first = int(start)
            last = int(end) if sep else first
        except ValueError:
            raise typer.BadParameter(f"not an ID or ID range: {part!r}") from None
        if first < 0 or last < first:
            raise typer.BadParameter(f"invalid ID range: {part!r}")
        if last - first >= MAX_RANGE_SPAN:
            raise typer.BadParameter(
                f"ID range too wide: {part!r} (at most {MAX_RANGE_SPAN} IDs)"
            )
        ids.extend(range(first, last + 1))

    if not ids:
        raise typer.BadParameter("empty selection")
    return list(dict.fromkeys(ids))


def _open(ctx: typer.Context):
    try:
        first_ref_id = get_first_ref_id()
    except ValueError as e:
        fail(str(e))
    return open_store(
        ctx.obj.path,
        Item,
        lambda data: ItemStore(data, first_ref_id=first_ref_id),
    )


def _label(item: Item) -> Text:
    ref = "-" if item.ref_id is None else str(item.ref_id)
    style = "dim" if item.state is State.DONE else ""
    label = Text(style=style)
    label.append(f"{ref:>3} ", style="bold")
    label.append(f"{STATE_MARKERS[item.state]} ")
    label.append(item.name)
    if item.context:
        label.append(f" @{item.context}", style="cyan")
    return label


def _add_branch(tree: Tree, item: Item, mode: str, hide_done: bool) -> None:
    branch = tree.add(_label(item))
    if mode == "shallow":
        return

    children = [c for c in item.children if not (hide_done and c.state is State.DONE)]
    if mode == "brief":
        if children:
            branch.add(_label(children[0]))
        return

    for child in children:
        _add_branch(branch, child, mode, hide_done)


def show_items(items: Iterable[Item], mode: str = "tree", hide_done: bool = False) -> None:
    """Print items as a tree.

    `mode` is "tree" (all descendants), "brief" (first child only) or
    "shallow" (no children).
    """
    items = list(items)
    if not items:
        typer.echo("No items found.")
        return

    tree = Tree("", hide_root=True)
    for item in items:
        _add_branch(tree, item, mode, hide_done)
    console.print(tree)


def _show_next(store: ItemStore) -> None:
    show_items(
        (i for i in store.records() if i.state is State.TODO),
        mode="shallow",
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    path: PathOption = None,
    verbose: VerboseOption = False,
) -> None:
    setup_logging(verbose)
    ctx.obj = CliState(path=get_item_path(path))

    if ctx.invoked_subcommand is None:
        with _open(ctx) as store:
            _show_next(store)


def list_items(ctx: typer.Context) -> None:
    """Show every item that isn't done, as a tree."""
    with _open(ctx) as store:
        show_items(
            (i for i in store.records() if i.state is not State.DONE),
            mode="tree",
            hide_done=True,
        )


app.command("list")(list_items)
app.command("ls", hidden=True)(list_items)


@app.command("next")
def next_items(ctx: typer.Context) -> None:
    """Show the pending top-level tasks."""
    with _open(ctx) as store:
        _show_next(store)


@app.command()
def add(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="The name of the item.")],
    context: ContextOption = None,
    note: NoteOption = False,
) -> None:
    """Add an item at the top level."""
    state = State.NOTE if note else State.TODO
    with _open(ctx) as store:
        item = store.add_item_on_root(name, context or None, state)
        typer.echo(f"Added item {item.ref_id}")


@sel_app.callback(invoke_without_command=True)
def sel(
    ctx: typer.Context,
    selection: Annotated[str, typer.Argument(help="IDs to select, e.g. 1,3,5-7.")],
) -> None:
    ctx.obj.selection = parse_range(selection)

    if ctx.invoked_subcommand is None:
        _show_selection(ctx, "tree")


def _selected(store: ItemStore, selection: list[int]) -> list[Item]:
    items = []
    for ref_id in selection:
        item = store.find(ref_id)
        if item is None:
            raise NotFound(ref_id)
        items.append(item)
    return items


def _show_selection(ctx: typer.Context, mode: str) -> None:
    with _open(ctx) as store:
        show_items(_selected(store, ctx.obj.selection), mode=mode)


@sel_app.command("mod")
def sel_modify(
    ctx: typer.Context,
    name: Annotated[
        Optional[str],
        typer.Argument(help="The items' new name."),
    ] = None,
    context: Annotated[
        Optional[str],
        typer.Option(
            "--context", "-c",
            help="The items' new context; set to an empty string to unset.",
        ),
    ] = None,
    note: Annotated[
        Optional[bool],
        typer.Option("--note/--task", help="Turn the items into notes or tasks."),
    ] = None,
) -> None:
    """Modify the selected items."""
    changes = ItemChanges(name=name, context=context, note=note)
    if changes.is_empty():
        fail("nothing to modify; give a name, --context, --note or --task")

    with _open(ctx) as store:
        store.mass_modify(ctx.obj.selection, changes)


@sel_app.command("add-child")
def sel_add_child(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="The name of the new item.")],
    context: ContextOption = None,
    note: NoteOption = False,
) -> None:
    """Add a child to each of the selected items."""
    selection = ctx.obj.selection
    state = State.NOTE if note else State.TODO

    with _open(ctx) as store:
        if len(selection) > 1 and not external.confirm(
            f"Add {name!r} under {len(selection)} items?", False
        ):
            return

        for ref_id in selection:
            item = store.add_child_to_ref_id(ref_id, name, context or None, state)
            typer.echo(f"Added item {item.ref_id} under {ref_id}")


sel_app.command("sub", hidden=True)(sel_add_child)


@sel_app.command("done")
def sel_done(ctx: typer.Context) -> None:
    """Mark the selected items as done, if they are tasks."""
    with _open(ctx) as store:
        count = store.mark_done(ctx.obj.selection)
        typer.echo(f"Completed {count} item{'' if count == 1 else 's'}.")


@sel_app.command("tree")
def sel_tree(ctx: typer.Context) -> None:
    """List the selected items with all their children."""
    _show_selection(ctx, "tree")


@sel_app.command("brief")
def sel_brief(ctx: typer.Context) -> None:
    """List the selected items with only their first child."""
    _show_selection(ctx, "brief")


sel_app.command("list", hidden=True)(sel_brief)
sel_app.command("ls", hidden=True)(sel_brief)


@sel_app.command("shallow")
def sel_shallow(ctx: typer.Context) -> None:
    """List the selected items without children."""
    _show_selection(ctx, "shallow")


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
