"""
Pydantic models for item data.

An item has a free‑text ``name`` and a ``category`` used as a coarse
grouping and filter key.  ``ItemCreate`` and ``ItemUpdate`` carry the
client supplied fields; ``ItemRead`` adds the store assigned ``id``.
Updates replace both fields, so ``ItemUpdate`` requires them.
"""

from pydantic import BaseModel, Field


class ItemBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Widget"])
    category: str = Field(..., min_length=1, examples=["Hardware"])


class ItemCreate(ItemBase):
    """Schema for creating an item."""
    pass


class ItemUpdate(ItemBase):
    """Schema for replacing the name and category of an item."""
    pass


class ItemRead(ItemBase):
    """Schema for reading an item from the API."""

    id: int

    model_config = {
        "from_attributes": True,
    }
