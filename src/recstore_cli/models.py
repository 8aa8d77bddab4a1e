"""Record models for recstore-cli."""

from collections.abc import Iterator
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Bookmark(BaseModel):
    """A saved link."""

    id: int = Field(ge=0)
    name: str
    url: str
    tags: list[str] = []
    archived: bool = False


class State(str, Enum):
    TODO = "Todo"
    NOTE = "Note"
    DONE = "Done"


class Item(BaseModel):
    """A task or note, possibly with nested children."""

    ref_id: Optional[int] = Field(default=None, ge=0)  # None once Done
    internal_id: int = Field(ge=0)
    name: str
    context: Optional[str] = None
    state: State = State.TODO
    children: list["Item"] = []

    def normalize(self) -> "Item":
        """Drop the reference ID of a Done item."""
        if self.state is State.DONE:
            self.ref_id = None
        return self

    def walk(self) -> Iterator["Item"]:
        """Yield this item and all of its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


class ItemChanges(BaseModel):
    """Fields to apply to every item of a batch modification.

    An empty `context` clears the context. `note=True` turns a pending item
    into a note, `note=False` turns a note back into a task.
    """

    name: Optional[str] = None
    context: Optional[str] = None
    note: Optional[bool] = None

    def is_empty(self) -> bool:
        return self.name is None and self.context is None and self.note is None
