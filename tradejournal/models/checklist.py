"""Checklist data models."""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

ChecklistKind = Literal["entry", "exit"]


class ChecklistItem(BaseModel):
    """One yes/no criterion of a checklist."""

    id: str = Field(..., description="Item identifier")
    text: str = Field(..., min_length=1, description="Criterion text")
    order: int = Field(..., ge=0, description="Position within the checklist")

    model_config = {"frozen": True}


class Checklist(BaseModel):
    """A reusable entry or exit checklist template.

    Journal entries reference a checklist by id and keep their own
    snapshot of results keyed by item id, so editing the template never
    changes historical entries.
    """

    id: str = Field(..., description="Checklist identifier")
    user_id: str = Field(..., description="Owning user identifier")
    kind: ChecklistKind = Field(..., description="Checklist kind (entry/exit)")
    name: str = Field(..., min_length=1, description="Name, unique per user and kind")
    items: list[ChecklistItem] = Field(default_factory=list, description="Ordered items")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now, description="Last update timestamp"
    )

    model_config = {"frozen": True}

    def ordered_items(self) -> list[ChecklistItem]:
        """Return items sorted by their order index."""
        return sorted(self.items, key=lambda item: item.order)

    def snapshot_results(self, checked_item_ids: set[str]) -> dict[str, bool]:
        """Freeze completion results for the items as they are now.

        Args:
            checked_item_ids: Ids of the items marked as done.

        Returns:
            Mapping of every current item id to whether it was checked.
        """
        return {item.id: item.id in checked_item_ids for item in self.ordered_items()}
