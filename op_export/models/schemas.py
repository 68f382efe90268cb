from pydantic import BaseModel, Field
from typing import Any


class FetchFailure(BaseModel):
    item_id: str
    reason: str


class ExportResult(BaseModel):
    item_ids: list[str] = Field(default_factory=list)
    items: list[Any] = Field(default_factory=list)
    failures: list[FetchFailure] = Field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.item_ids)

    @property
    def succeeded(self) -> int:
        return len(self.items)

    @property
    def failed_ids(self) -> list[str]:
        return [f.item_id for f in self.failures]
