"""Stock item entity."""

from datetime import datetime

from pydantic import BaseModel, Field


class Item(BaseModel):
    """A stocked item (rice, oil, ...). Only is_active may change once used."""

    id: int | None = None
    name: str
    uom: str = "kg"  # unit of measure
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
