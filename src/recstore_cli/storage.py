"""Reading and writing the JSON data file."""

import json
import logging
import os
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import LoadError, ParseError, SaveError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def touch_read(path: Path) -> str:
    """Read the data file, creating it (and its directory) if missing."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise LoadError(path, e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise LoadError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e


def deserialize(text: str, model: type[M]) -> list[M]:
    """Parse a JSON array of records. Blank text is an empty array."""
    if not text.strip():
        return []
    try:
        return TypeAdapter(list[model]).validate_json(text)
    except ValidationError as e:
        raise ParseError(f"failed to parse file: {e}") from e


def serialize(records: Sequence[BaseModel], pretty: bool = False) -> str:
    """Render records as a JSON array."""
    data = [r.model_dump(mode="json") for r in records]
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data, separators=(",", ":"))


def write_text(path: Path, text: str) -> None:
    """Atomically replace the data file with `text`."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            if path.exists():
                shutil.copymode(path, tmp_name)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise SaveError(path, e.strerror or str(e)) from e
    logger.debug("Wrote %d bytes to %s", len(text), path)


def load_records(path: Path, model: type[M]) -> list[M]:
    """Read and parse the data file at `path`."""
    return deserialize(touch_read(path), model)
