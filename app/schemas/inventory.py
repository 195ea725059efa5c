from typing import Optional
from pydantic import BaseModel, Field, AliasChoices


class AddItemRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    cost_price: float = Field(gt=0, validation_alias=AliasChoices("cost_price", "costPrice"))
    selling_price: float = Field(gt=0, validation_alias=AliasChoices("selling_price", "sellingPrice"))
    sku: Optional[str] = None
    category: Optional[str] = None
    stock_qty: int = Field(default=0, ge=0, validation_alias=AliasChoices("stock_qty", "stockQty"))
    low_stock_limit: Optional[int] = Field(
        default=None, ge=0, validation_alias=AliasChoices("low_stock_limit", "lowStockLimit")
    )
    unit: str = "pcs"


class UpdateItemRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    cost_price: Optional[float] = Field(default=None, gt=0,
                                        validation_alias=AliasChoices("cost_price", "costPrice"))
    selling_price: Optional[float] = Field(default=None, gt=0,
                                           validation_alias=AliasChoices("selling_price", "sellingPrice"))
    sku: Optional[str] = None
    category: Optional[str] = None
    stock_qty: Optional[int] = Field(default=None, ge=0,
                                     validation_alias=AliasChoices("stock_qty", "stockQty"))
    low_stock_limit: Optional[int] = Field(
        default=None, ge=0, validation_alias=AliasChoices("low_stock_limit", "lowStockLimit")
    )
    unit: Optional[str] = None
