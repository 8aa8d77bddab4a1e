"""The item store: a tree of tasks and notes.

Every item has an internal ID that never changes while it exists, and
pending items (Todo or Note) also carry a short reference ID that is shown
to the user. Completing an item releases its reference ID so the next new
item can reuse it.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Optional

import typer

from . import external
from .errors import NotFound, RepeatedInternalId, RepeatedRefId
from .ids import lowest_free, lowest_free_at_or_above
from .manager import RecordManager
from .models import Item, ItemChanges, State

logger = logging.getLogger(__name__)


def walk_items(items: Iterable[Item]) -> Iterator[Item]:
    """Yield every item of a forest in pre-order."""
    for item in items:
        yield from item.walk()


class ItemStore(RecordManager[Item]):
    """Items loaded from the data file, with both ID spaces tracked."""

    def __init__(self, data: list[Item], first_ref_id: int = 0) -> None:
        internal_ids: set[int] = set()
        ref_ids: set[int] = set()
        index: dict[int, Item] = {}

        for item in walk_items(data):
            item.normalize()

            if item.internal_id in internal_ids:
                raise RepeatedInternalId(item.internal_id)
            internal_ids.add(item.internal_id)
            index[item.internal_id] = item

            if item.ref_id is not None:
                if item.ref_id in ref_ids:
                    raise RepeatedRefId(item.ref_id)
                ref_ids.add(item.ref_id)

        super().__init__(data)
        self.first_ref_id = first_ref_id
        self._internal_ids = internal_ids
        self._ref_ids = ref_ids
        self._index = index

        # pending items saved without a reference ID get one now
        for item in walk_items(data):
            if item.state is not State.DONE and item.ref_id is None:
                item.ref_id = self._take_ref_id()

    def identity(self, record: Item) -> Optional[int]:
        return record.ref_id

    @property
    def ref_ids(self) -> frozenset[int]:
        return frozenset(self._ref_ids)

    @property
    def internal_ids(self) -> frozenset[int]:
        return frozenset(self._internal_ids)

    def walk(self) -> Iterator[Item]:
        return walk_items(self._data)

    def find(self, identity: int) -> Optional[Item]:
        """Return the first item with reference ID `identity` in pre-order."""
        for item in self.walk():
            if item.ref_id == identity:
                return item
        return None

    def find_mut(self, identity: int) -> Optional[Item]:
        return self.find(identity)

    def by_internal_id(self, internal_id: int) -> Optional[Item]:
        return self._index.get(internal_id)

    def surface_ref_ids(self) -> list[int]:
        """Reference IDs of the top-level items, in order."""
        return [item.ref_id for item in self._data if item.ref_id is not None]

    def _take_ref_id(self) -> int:
        ref_id = lowest_free_at_or_above(self._ref_ids, self.first_ref_id)
        self._ref_ids.add(ref_id)
        return ref_id

    def _take_internal_id(self) -> int:
        internal_id = lowest_free(self._internal_ids)
        self._internal_ids.add(internal_id)
        return internal_id

    def _adopt(self, item: Item) -> Item:
        """Give a new subtree fresh IDs and register it in the index."""
        for node in item.walk():
            node.internal_id = self._take_internal_id()
            node.ref_id = None if node.state is State.DONE else self._take_ref_id()
            self._index[node.internal_id] = node.normalize()
        return item

    def _new_item(
        self,
        name: str,
        context: Optional[str],
        state: State,
        children: Sequence[Item],
    ) -> Item:
        item = Item(
            internal_id=0,
            name=name,
            context=context,
            state=state,
            children=list(children),
        )
        return self._adopt(item)

    def add_item_on_root(
        self,
        name: str,
        context: Optional[str] = None,
        state: State = State.TODO,
        children: Sequence[Item] = (),
    ) -> Item:
        """Append a new top-level item."""
        item = self._new_item(name, context, state, children)
        self._data.append(item)
        self.mark_dirty()
        logger.debug("Added item %s (internal %d)", item.ref_id, item.internal_id)
        return item

    def add_child_to_ref_id(
        self,
        ref_id: int,
        name: str,
        context: Optional[str] = None,
        state: State = State.TODO,
        children: Sequence[Item] = (),
    ) -> Item:
        """Append a new item under the item with reference ID `ref_id`.

        Raises:
            NotFound: no item in the tree has that reference ID
        """
        parent = self.find_mut(ref_id)
        if parent is None:
            raise NotFound(ref_id)

        item = self._new_item(name, context, state, children)
        parent.children.append(item)
        self.mark_dirty()
        logger.debug(
            "Added item %s (internal %d) under %d", item.ref_id, item.internal_id, ref_id
        )
        return item

    def mass_modify(
        self,
        selection: Sequence[int],
        changes: ItemChanges,
        confirm: Optional[Callable[[str, bool], bool]] = None,
    ) -> int:
        """Apply `changes` to every selected item and return how many changed.

        A single item is modified straight away. Several items are modified
        only after the user confirms a preview of the changes.
        """
        selection = list(dict.fromkeys(selection))
        if not selection or changes.is_empty():
            return 0

        if len(selection) > 1:
            typer.echo("This will make the following modifications:", err=True)
            if changes.name is not None:
                typer.echo(f" * Change name to {changes.name!r};", err=True)
            if changes.context is not None:
                typer.echo(f" * Change context to {changes.context!r};", err=True)
            if changes.note is True:
                typer.echo(" * Transform into a note (if not already);", err=True)
            elif changes.note is False:
                typer.echo(" * Transform into a task (if not already);", err=True)

            confirm = confirm or external.confirm
            if not confirm(f"Modify {len(selection)} items?", False):
                return 0

        def _apply(item: Item) -> bool:
            if changes.name is not None:
                item.name = changes.name
            if changes.context is not None:
                item.context = changes.context or None
            if changes.note is True:
                if item.state is not State.DONE:
                    item.state = State.NOTE
            elif changes.note is False:
                if item.state is State.NOTE:
                    item.state = State.TODO
            return True

        modified = 0
        for ref_id in selection:
            if self.interact_mut(ref_id, _apply) is not None:
                modified += 1
            else:
                logger.debug("No item with reference ID %d, skipping", ref_id)

        typer.echo(f"Modified {modified} item{'' if modified == 1 else 's'}.", err=True)
        return modified

    def mark_done(self, selection: Sequence[int]) -> int:
        """Complete the selected Todo items, releasing their reference IDs."""
        done = 0
        for ref_id in dict.fromkeys(selection):
            item = self.find_mut(ref_id)
            if item is None or item.state is not State.TODO:
                continue
            item.state = State.DONE
            item.normalize()
            self._ref_ids.discard(ref_id)
            done += 1

        if done:
            self.mark_dirty()
        return done
