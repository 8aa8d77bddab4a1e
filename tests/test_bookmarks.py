"""Tests for the bookmark store."""

import json
from pathlib import Path

import pytest

from recstore_cli.bookmarks import BookmarkStore, toggle_trailing_slash
from recstore_cli.errors import DuplicateIdentifier, DuplicateUrl, TitleFetchError
from recstore_cli.manager import Manager, RecordManager
from recstore_cli.models import Bookmark

from conftest import make_bookmark, read_json


def _no_fetch(url: str) -> str:
    raise AssertionError("title should not be fetched")


def _failing_fetch(url: str) -> str:
    raise TitleFetchError(url, "connection refused")


class TestConstruction:
    """Tests for loading bookmarks into a store."""

    def test_empty_store(self) -> None:
        """An empty list should give a clean, empty store."""
        store = BookmarkStore([])
        assert store.records() == ()
        assert store.modified is False

    def test_repeated_id_rejected(self) -> None:
        """Two bookmarks with one ID should be rejected."""
        with pytest.raises(DuplicateIdentifier) as exc:
            BookmarkStore([make_bookmark(1, "http://a"), make_bookmark(1, "http://b")])
        assert exc.value.record_id == 1
        assert "removed manually" in str(exc.value)

    def test_used_ids_mirror_records(self) -> None:
        """used_ids should hold the ID of every record."""
        store = BookmarkStore([make_bookmark(0, "http://a"), make_bookmark(4, "http://b")])
        assert store.used_ids == {0, 4}

    def test_satisfies_manager_protocol(self) -> None:
        """BookmarkStore should satisfy the Manager protocol."""
        assert isinstance(BookmarkStore([]), Manager)

    def test_store_without_identity_cannot_be_built(self) -> None:
        """A store that doesn't define identity() should fail when built, not on lookup."""

        class NoIdentity(RecordManager[Bookmark]):
            pass

        with pytest.raises(TypeError):
            NoIdentity([make_bookmark(0, "http://a")])


class TestAlreadyHasUrl:
    """Tests for the duplicate URL check."""

    @pytest.mark.parametrize(
        "url, expected",
        [("http://example.com", "http://example.com/"), ("http://example.com/", "http://example.com")],
    )
    def test_toggle_trailing_slash(self, url: str, expected: str) -> None:
        """A trailing slash should be added or removed."""
        assert toggle_trailing_slash(url) == expected

    def test_verbatim_match(self) -> None:
        """An identical URL should be found."""
        store = BookmarkStore([make_bookmark(3, "http://example.com")])
        assert store.already_has_url("http://example.com") == 3

    def test_trailing_slash_equivalence_both_ways(self) -> None:
        """URLs differing by a trailing slash should match."""
        store = BookmarkStore([
            make_bookmark(0, "http://a.com/"),
            make_bookmark(1, "http://b.com"),
        ])
        assert store.already_has_url("http://a.com") == 0
        assert store.already_has_url("http://b.com/") == 1

    def test_archived_bookmarks_count(self) -> None:
        """Archived bookmarks should still count as duplicates."""
        store = BookmarkStore([make_bookmark(2, "http://a.com", archived=True)])
        assert store.already_has_url("http://a.com") == 2

    def test_verbatim_match_preferred_over_toggled(self) -> None:
        """An exact match should win over a slash-toggled one."""
        store = BookmarkStore([
            make_bookmark(0, "http://a.com/"),
            make_bookmark(1, "http://a.com"),
        ])
        assert store.already_has_url("http://a.com") == 1

    def test_no_match(self) -> None:
        """An unknown URL should give None."""
        store = BookmarkStore([make_bookmark(0, "http://a.com")])
        assert store.already_has_url("http://b.com") is None

    def test_empty_url_matches_only_verbatim(self) -> None:
        """An empty URL should not match "/"."""
        store = BookmarkStore([make_bookmark(0, "/")])
        assert store.already_has_url("") is None


class TestAddBookmark:
    """Tests for add_bookmark."""

    def test_add_to_empty_store(self) -> None:
        """The first bookmark should get ID 0."""
        store = BookmarkStore([])
        store.add_bookmark("Example", "http://example.com", [])

        [bookmark] = store.records()
        assert bookmark.id == 0
        assert bookmark.name == "Example"
        assert bookmark.archived is False
        assert store.modified is True

    def test_duplicate_url_with_trailing_slash_rejected(self) -> None:
        """A slash-toggled duplicate should be rejected."""
        store = BookmarkStore([make_bookmark(5, "http://example.com/")])

        with pytest.raises(DuplicateUrl) as exc:
            store.add_bookmark("X", "http://example.com", [])

        assert exc.value.record_id == 5
        assert len(store.records()) == 1
        assert store.modified is False

    def test_lowest_free_id_reused(self) -> None:
        """New bookmarks should fill gaps in the IDs first."""
        store = BookmarkStore([make_bookmark(0, "http://a"), make_bookmark(2, "http://c")])
        assert store.add_bookmark("b", "http://b").id == 1
        assert store.add_bookmark("d", "http://d").id == 3

    def test_tags_stored(self) -> None:
        """Tags should be kept on the new bookmark."""
        store = BookmarkStore([])
        assert store.add_bookmark("a", "http://a", ["x", "y"]).tags == ["x", "y"]

    def test_ids_stay_unique_over_many_adds(self) -> None:
        """IDs should stay unique over many adds."""
        store = BookmarkStore([make_bookmark(1, "http://seed")])
        for i in range(20):
            store.add_bookmark(f"b{i}", f"http://site{i}")
        ids = [b.id for b in store.records()]
        assert len(ids) == len(set(ids))
        assert set(ids) == store.used_ids


class TestAddBookmarkFromUrl:
    """Tests for adding a bookmark by fetching its title."""

    def test_title_fetched_and_trimmed(self) -> None:
        """The fetched title should be trimmed."""
        store = BookmarkStore([])
        bookmark = store.add_bookmark_from_url(
            "http://a.com", False, fetch_title=lambda url: "  A Title \n"
        )
        assert bookmark.name == "A Title"
        assert bookmark.tags == []
        assert store.modified is True

    def test_duplicate_checked_before_fetching(self) -> None:
        """A duplicate URL should be rejected before any fetch."""
        store = BookmarkStore([make_bookmark(0, "http://a.com")])
        with pytest.raises(DuplicateUrl):
            store.add_bookmark_from_url("http://a.com/", True, fetch_title=_no_fetch)

    def test_fetch_error_surfaces_without_fallback(self) -> None:
        """Without fallback, a failed fetch should raise."""
        store = BookmarkStore([])
        with pytest.raises(TitleFetchError):
            store.add_bookmark_from_url("http://a.com", False, fetch_title=_failing_fetch)
        assert store.records() == ()
        assert store.modified is False

    def test_fetch_error_falls_back_to_typed_title(self) -> None:
        """With fallback, the user should be asked for a title."""
        store = BookmarkStore([])
        prompts = []

        def read_line(prompt: str) -> str:
            prompts.append(prompt)
            return " Typed "

        bookmark = store.add_bookmark_from_url(
            "http://a.com", True, fetch_title=_failing_fetch, read_line=read_line
        )
        assert bookmark.name == "Typed"
        assert len(prompts) == 1


class TestAddFromLines:
    """Tests for bulk adding."""

    def test_blank_lines_skipped(self) -> None:
        """Blank lines should be skipped and URLs trimmed."""
        store = BookmarkStore([])
        added = store.add_from_lines(
            ["http://a", "", "   ", " http://b "], fetch_title=lambda url: url.upper()
        )
        assert [b.url for b in added] == ["http://a", "http://b"]
        assert [b.name for b in added] == ["HTTP://A", "HTTP://B"]

    def test_stops_at_first_error_keeping_earlier_adds(self) -> None:
        """The first error should stop the run but keep earlier adds."""
        store = BookmarkStore([])
        with pytest.raises(DuplicateUrl):
            store.add_from_lines(
                ["http://a", "http://a/", "http://c"], fetch_title=lambda url: "t"
            )
        assert [b.url for b in store.records()] == ["http://a"]
        assert store.modified is True


class TestMutation:
    """Tests for interact, archive and remove."""

    def test_interact_returns_none_for_missing_id(self) -> None:
        """interact() should return None for unknown IDs."""
        store = BookmarkStore([make_bookmark(0, "http://a")])
        assert store.interact(9, lambda b: b.url) is None
        assert store.interact(0, lambda b: b.url) == "http://a"
        assert store.modified is False

    def test_interact_mut_marks_dirty_only_on_match(self) -> None:
        """interact_mut() should mark dirty only when it found a record."""
        store = BookmarkStore([make_bookmark(0, "http://a")])
        assert store.interact_mut(9, lambda b: None) is None
        assert store.modified is False
        store.interact_mut(0, lambda b: setattr(b, "name", "renamed"))
        assert store.find(0).name == "renamed"
        assert store.modified is True

    def test_archive(self) -> None:
        """archive() should hide the bookmark from unarchived()."""
        store = BookmarkStore([make_bookmark(0, "http://a"), make_bookmark(1, "http://b")])
        assert store.archive(1) is True
        assert [b.id for b in store.unarchived()] == [0]
        assert store.archive(7) is False

    def test_remove_swaps_last_into_place_and_frees_id(self) -> None:
        """Removing should move the last bookmark into the gap."""
        store = BookmarkStore([
            make_bookmark(0, "http://a"),
            make_bookmark(1, "http://b"),
            make_bookmark(2, "http://c"),
        ])
        assert store.remove_bookmark(0) is True
        assert [b.id for b in store.records()] == [2, 1]
        assert store.used_ids == {1, 2}
        assert store.modified is True
        assert store.add_bookmark("again", "http://a").id == 0

    def test_remove_last_record(self) -> None:
        """Removing the last bookmark should shorten the list."""
        store = BookmarkStore([make_bookmark(0, "http://a"), make_bookmark(1, "http://b")])
        store.remove_bookmark(1)
        assert [b.id for b in store.records()] == [0]

    def test_remove_missing_id(self) -> None:
        """Removing an unknown ID should change nothing."""
        store = BookmarkStore([make_bookmark(0, "http://a")])
        assert store.remove_bookmark(3) is False
        assert store.modified is False


class TestSaveIfModified:
    """Tests for save_if_modified."""

    def test_unmodified_store_not_written(self, bookmark_file: Path) -> None:
        """A clean store should not touch the file."""
        store = BookmarkStore([make_bookmark(0, "http://a")])
        assert store.save_if_modified(bookmark_file) is False
        assert not bookmark_file.exists()

    def test_modified_store_written(self, bookmark_file: Path) -> None:
        """A dirty store should write every record."""
        store = BookmarkStore([])
        store.add_bookmark("Example", "http://example.com")
        assert store.save_if_modified(bookmark_file) is True
        assert read_json(bookmark_file) == [{
            "id": 0, "name": "Example", "url": "http://example.com",
            "tags": [], "archived": False,
        }]

    def test_second_save_is_a_no_op(self, bookmark_file: Path) -> None:
        """A second save with no changes should not write."""
        store = BookmarkStore([])
        store.add_bookmark("Example", "http://example.com")
        assert store.save_if_modified(bookmark_file) is True
        bookmark_file.write_text("sentinel")
        assert store.save_if_modified(bookmark_file) is False
        assert bookmark_file.read_text() == "sentinel"

    def test_mark_dirty_after_direct_edit(self, bookmark_file: Path) -> None:
        """mark_dirty() should make direct edits get saved."""
        store = BookmarkStore([make_bookmark(0, "http://a")])
        store.records_mut().clear()
        store.mark_dirty()
        store.save_if_modified(bookmark_file)
        assert json.loads(bookmark_file.read_text()) == []
