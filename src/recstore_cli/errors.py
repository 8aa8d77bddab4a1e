"""Exceptions raised by the record stores and their collaborators.

Library code raises these; the CLI modules turn them into exit codes.
"""

from pathlib import Path


class RecordStoreError(Exception):
    """Base class for every error in recstore-cli."""


class LoadError(RecordStoreError):
    """The data file could not be read."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        super().__init__(f"failed to load file {path}: {detail}")


class ParseError(RecordStoreError):
    """The data file is not a valid record document."""


class SaveError(RecordStoreError):
    """The data file could not be written."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        super().__init__(f"failed to save changes to {path}: {detail}")


class DuplicateIdentifier(RecordStoreError):
    """Two bookmarks in the document share an ID."""

    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"repeated ID: {record_id}; it'll have to be removed manually.")


class RepeatedInternalId(RecordStoreError):
    """Two items in the tree share an internal ID."""

    def __init__(self, internal_id: int) -> None:
        self.internal_id = internal_id
        super().__init__(
            f"repeated internal ID: {internal_id}; it'll have to be removed manually."
        )


class RepeatedRefId(RecordStoreError):
    """Two items in the tree share a reference ID."""

    def __init__(self, ref_id: int) -> None:
        self.ref_id = ref_id
        super().__init__(
            f"repeated reference ID: {ref_id}; it'll have to be removed manually."
        )


class DuplicateUrl(RecordStoreError):
    """A bookmark with an equivalent URL already exists."""

    def __init__(self, record_id: int, url: str) -> None:
        self.record_id = record_id
        self.url = url
        super().__init__(f"repeated url with bookmark #{record_id} ({url})")


class NotFound(RecordStoreError):
    """No record carries the requested identifier."""

    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"no item with ID {record_id}")


class ExternalCommandError(RecordStoreError):
    """An external program failed to start or exited with an error."""

    def __init__(self, command: str, detail: str) -> None:
        self.command = command
        super().__init__(f"{command}: {detail}")


class TitleFetchError(RecordStoreError):
    """The page title of a URL could not be retrieved."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        super().__init__(f"failed to get title of {url}: {detail}")


class Cancelled(RecordStoreError):
    """The user dismissed an interactive prompt."""
