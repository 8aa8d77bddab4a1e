"""The load / mutate / save-if-modified contract shared by the record stores."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Generic, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from .storage import serialize, write_text

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)
T = TypeVar("T")


@runtime_checkable
class Manager(Protocol[R]):
    """What every record store offers to the command layer."""

    @property
    def modified(self) -> bool: ...

    def records(self) -> Sequence[R]: ...

    def records_mut(self) -> list[R]: ...

    def find(self, identity: int) -> Optional[R]: ...

    def find_mut(self, identity: int) -> Optional[R]: ...

    def interact(self, identity: int, action: Callable[[R], T]) -> Optional[T]: ...

    def interact_mut(self, identity: int, action: Callable[[R], T]) -> Optional[T]: ...

    def mark_dirty(self) -> None: ...

    def save_if_modified(self, path: Path) -> bool: ...


class RecordManager(ABC, Generic[R]):
    """Default `Manager` over a flat list of records.

    Subclasses provide `identity()` and may override `find`/`find_mut` to
    search somewhere other than the top level.
    """

    pretty: bool = False

    def __init__(self, data: list[R]) -> None:
        self._data = data
        self._modified = False

    @property
    def modified(self) -> bool:
        return self._modified

    @abstractmethod
    def identity(self, record: R) -> Optional[int]:
        """The ID `find` compares against."""

    def records(self) -> Sequence[R]:
        return tuple(self._data)

    def records_mut(self) -> list[R]:
        """Direct access to the list. Call `mark_dirty()` after changing it."""
        return self._data

    def find(self, identity: int) -> Optional[R]:
        for record in self._data:
            if self.identity(record) == identity:
                return record
        return None

    def find_mut(self, identity: int) -> Optional[R]:
        return self.find(identity)

    def interact(self, identity: int, action: Callable[[R], T]) -> Optional[T]:
        """Run a read-only `action` on the record, or return None if absent."""
        record = self.find(identity)
        if record is None:
            return None
        return action(record)

    def interact_mut(self, identity: int, action: Callable[[R], T]) -> Optional[T]:
        """Run a mutating `action` on the record and mark the store dirty."""
        record = self.find_mut(identity)
        if record is None:
            return None
        result = action(record)
        self.mark_dirty()
        return result

    def mark_dirty(self) -> None:
        self._modified = True

    def save_if_modified(self, path: Path) -> bool:
        """Write every record to `path` if anything changed since the last sync.

        Returns True when a write happened.
        """
        if not self._modified:
            logger.debug("No changes, not writing %s", path)
            return False
        write_text(path, serialize(self._data, pretty=self.pretty))
        self._modified = False
        return True
