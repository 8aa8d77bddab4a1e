"""Configuration and data file path resolution for recstore-cli."""

import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

BOOKMARK_FILE_ENV = "BKMK_FILE"
ITEM_FILE_ENV = "ITMN_FILE"


def _env(name: str) -> str | None:
    """Read an environment variable, treating an empty value as unset."""
    value = os.environ.get(name)
    return value if value else None


def get_data_dir() -> Path:
    """Get the base data directory.

    Priority: $XDG_DATA_HOME, $XDG_DATA_DIR, ~/.local/share
    """
    data_dir = _env("XDG_DATA_HOME") or _env("XDG_DATA_DIR")
    if data_dir:
        return Path(data_dir).expanduser()
    return Path.home() / ".local" / "share"


def _resolve(override: str | None, env_name: str, filename: str) -> Path:
    """Resolve a data file path.

    Priority:
    1. --path PATH explicit override (highest)
    2. the tool's own env var (BKMK_FILE / ITMN_FILE)
    3. <data dir>/<filename>
    """
    if override:
        return Path(override).expanduser()

    env_path = _env(env_name)
    if env_path:
        return Path(env_path).expanduser()

    return get_data_dir() / filename


def get_bookmark_path(override: str | None = None) -> Path:
    """Get the bookmark file path (default ~/.local/share/bkmk)."""
    return _resolve(override, BOOKMARK_FILE_ENV, "bkmk")


def get_item_path(override: str | None = None) -> Path:
    """Get the item file path (default ~/.local/share/itmn)."""
    return _resolve(override, ITEM_FILE_ENV, "itmn")


def get_opener() -> str:
    return _env("OPENER") or "xdg-open"


def get_picker_command() -> str | None:
    """Command line replacing the default fzf/rofi picker, if any."""
    return _env("RECSTORE_PICKER")


def get_first_ref_id() -> int:
    """Lowest reference ID handed out to items ($ITMN_FIRST_REF_ID, default 0)."""
    raw = _env("ITMN_FIRST_REF_ID")
    if raw is None:
        return 0
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"ITMN_FIRST_REF_ID must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"ITMN_FIRST_REF_ID must be non-negative, got {value}")
    return value


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr; debug output only with --verbose."""
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, handlers=[handler], format="%(message)s", force=True)
