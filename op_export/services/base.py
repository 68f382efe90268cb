from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class VaultClient(Protocol):
    """
    The two things an export needs from a password manager.

    `OpClient` implements it by shelling out to `op`; tests use in-memory fakes.
    """

    def list_item_ids(self) -> list[str]:
        """Identifiers in listing order. Raises ListError."""
        ...

    def get_item(self, item_id: str) -> Any:
        """Parsed JSON detail for one item. Raises FetchError."""
        ...
