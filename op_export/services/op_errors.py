# op_export/services/op_errors.py

class OpError(Exception):
    """Base class for errors raised by the 1Password (op) integration."""


class ListError(OpError):
    """Listing the vault failed; nothing can be exported."""


class FetchError(OpError):
    """A single item could not be fetched as JSON."""

    def __init__(self, item_id: str, reason: str) -> None:
        super().__init__(f"{item_id}: {reason}")
        self.item_id = item_id
        self.reason = reason


class ExportWriteError(OpError):
    """The export file could not be written."""
