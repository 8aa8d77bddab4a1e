"""Test fixtures for recstore-cli."""

import json
from pathlib import Path

import pytest

from recstore_cli.models import Bookmark, Item, State

ENV_VARS = [
    "BKMK_FILE",
    "ITMN_FILE",
    "XDG_DATA_HOME",
    "XDG_DATA_DIR",
    "OPENER",
    "RECSTORE_PICKER",
    "ITMN_FIRST_REF_ID",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's real configuration out of every test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def bookmark_file(tmp_path: Path) -> Path:
    """Path of a bookmark file that doesn't exist yet."""
    return tmp_path / "bkmk"


@pytest.fixture
def item_file(tmp_path: Path) -> Path:
    """Path of an item file that doesn't exist yet."""
    return tmp_path / "itmn"


def write_json(path: Path, data: list) -> Path:
    path.write_text(json.dumps(data))
    return path


def read_json(path: Path) -> list:
    return json.loads(path.read_text())


def make_bookmark(id: int, url: str, name: str = "", archived: bool = False) -> Bookmark:
    return Bookmark(id=id, name=name or f"Bookmark {id}", url=url, archived=archived)


def make_item(
    internal_id: int,
    ref_id: int | None,
    name: str = "",
    state: State = State.TODO,
    children: list[Item] | None = None,
    context: str | None = None,
) -> Item:
    return Item(
        internal_id=internal_id,
        ref_id=ref_id,
        name=name or f"Item {internal_id}",
        context=context,
        state=state,
        children=children or [],
    )
