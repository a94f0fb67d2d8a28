"""Models for submitted receipts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """Individual line item from a receipt."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    short_description: str = Field(
        ..., alias="shortDescription", description="Short product description"
    )
    price: str = Field(..., description="Item price as decimal text, e.g. '6.49'")


class Receipt(BaseModel):
    """A purchase receipt as submitted by a client.

    Amounts, date and time are kept as the submitted text. They are parsed
    into exact values by :mod:`receiptpoints.services.parsing` when the
    receipt is validated or scored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    retailer: str = Field(..., description="Retailer or store name")
    purchase_date: str = Field(
        ..., alias="purchaseDate", description="Purchase date, YYYY-MM-DD"
    )
    purchase_time: str = Field(
        ..., alias="purchaseTime", description="Purchase time, HH:MM (24-hour)"
    )
    items: tuple[Item, ...] = Field(..., description="Items on the receipt")
    total: str = Field(..., description="Total amount paid as decimal text")


class ReceiptProcessResponse(BaseModel):
    """Response model for a processed receipt."""

    id: str = Field(..., description="Identifier of the stored receipt")
