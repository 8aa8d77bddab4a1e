"""The bookmark store: a flat list of links keyed by ID."""

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

import typer

from . import external
from .errors import DuplicateIdentifier, DuplicateUrl, TitleFetchError
from .ids import lowest_free
from .manager import RecordManager
from .models import Bookmark

logger = logging.getLogger(__name__)


def toggle_trailing_slash(url: str) -> str:
    """Return `url` with its trailing slash removed, or one appended."""
    if url.endswith("/"):
        return url[:-1]
    return f"{url}/"


class BookmarkStore(RecordManager[Bookmark]):
    """Bookmarks loaded from the data file, with their used-ID set."""

    pretty = True

    def __init__(self, data: list[Bookmark]) -> None:
        used_ids: set[int] = set()
        for bookmark in data:
            if bookmark.id in used_ids:
                raise DuplicateIdentifier(bookmark.id)
            used_ids.add(bookmark.id)

        super().__init__(data)
        self._used_ids = used_ids

    def identity(self, record: Bookmark) -> int:
        return record.id

    @property
    def used_ids(self) -> frozenset[int]:
        return frozenset(self._used_ids)

    def unarchived(self) -> list[Bookmark]:
        return [b for b in self._data if not b.archived]

    def already_has_url(self, url: str) -> Optional[int]:
        """Return the ID of a bookmark with `url`, ignoring a trailing slash."""
        candidates = [url] if not url else [url, toggle_trailing_slash(url)]
        for candidate in candidates:
            for bookmark in self._data:
                if bookmark.url == candidate:
                    return bookmark.id
        return None

    def _append(self, name: str, url: str, tags: Sequence[str]) -> Bookmark:
        free_id = lowest_free(self._used_ids)
        bookmark = Bookmark(id=free_id, name=name, url=url, tags=list(tags))
        self._data.append(bookmark)
        self._used_ids.add(free_id)
        self.mark_dirty()
        logger.debug("Added bookmark #%d (%s)", free_id, url)
        return bookmark

    def add_bookmark(self, name: str, url: str, tags: Sequence[str] = ()) -> Bookmark:
        """Add a bookmark under the lowest free ID.

        Raises:
            DuplicateUrl: a bookmark with the same URL already exists
        """
        existing = self.already_has_url(url)
        if existing is not None:
            raise DuplicateUrl(existing, url)
        return self._append(name, url, tags)

    def add_bookmark_from_url(
        self,
        url: str,
        allow_interactive_fallback: bool,
        fetch_title: Optional[Callable[[str], str]] = None,
        read_line: Optional[Callable[[str], str]] = None,
    ) -> Bookmark:
        """Add a bookmark named after the page title of `url`.

        If the title can't be fetched and `allow_interactive_fallback` is set,
        the user is asked to type one instead.
        """
        existing = self.already_has_url(url)
        if existing is not None:
            raise DuplicateUrl(existing, url)

        fetch_title = fetch_title or external.fetch_title
        read_line = read_line or external.read_line

        try:
            title = fetch_title(url)
        except TitleFetchError as e:
            if not allow_interactive_fallback:
                raise
            typer.echo(f"Failed to get title: {e}", err=True)
            typer.echo(f"  Url: {url!r}", err=True)
            title = read_line("  Type a new title")

        title = title.strip()
        typer.echo(f"New bookmark: {title!r} ({url!r})", err=True)
        return self._append(title, url, ())

    def add_from_lines(
        self,
        lines: Iterable[str],
        allow_interactive_fallback: bool = True,
        fetch_title: Optional[Callable[[str], str]] = None,
        read_line: Optional[Callable[[str], str]] = None,
    ) -> list[Bookmark]:
        """Add one bookmark per non-blank line, stopping at the first error.

        Bookmarks added before the error stay in the store.
        """
        added = []
        for line in lines:
            url = line.strip()
            if not url:
                continue
            added.append(
                self.add_bookmark_from_url(
                    url,
                    allow_interactive_fallback,
                    fetch_title=fetch_title,
                    read_line=read_line,
                )
            )
        return added

    def archive(self, bookmark_id: int) -> bool:
        """Archive a bookmark. Returns False if there's no such ID."""

        def _archive(bookmark: Bookmark) -> bool:
            bookmark.archived = True
            return True

        return self.interact_mut(bookmark_id, _archive) is not None

    def remove_bookmark(self, bookmark_id: int) -> bool:
        """Delete a bookmark and free its ID. The last bookmark takes its slot."""
        records = self.records_mut()
        for pos, bookmark in enumerate(records):
            if bookmark.id == bookmark_id:
                break
        else:
            return False

        last = records.pop()
        if pos < len(records):
            records[pos] = last
        self._used_ids.discard(bookmark_id)
        self.mark_dirty()
        logger.debug("Removed bookmark #%d", bookmark_id)
        return True
