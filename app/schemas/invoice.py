from typing import List, Optional, Literal
from pydantic import BaseModel, Field, AliasChoices, ConfigDict


class LineItemRequest(BaseModel):
    item_id: int = Field(validation_alias=AliasChoices("item_id", "item", "itemId"))
    quantity: int = Field(ge=0)
    price: float = Field(ge=0, allow_inf_nan=False,
                         validation_alias=AliasChoices("price", "unit_price", "unitPrice"))


class QuoteRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: List[LineItemRequest] = Field(default_factory=list)
    discount: float = Field(default=0, ge=0, allow_inf_nan=False)
    paid_amount: float = Field(default=0, ge=0, allow_inf_nan=False,
                               validation_alias=AliasChoices("paid_amount", "paidAmount"))


class CreateInvoiceRequest(QuoteRequest):
    customer_id: Optional[int] = Field(default=None,
                                       validation_alias=AliasChoices("customer_id", "customerId"))
    payment_method: Literal["cash", "card", "upi", "due"] = Field(
        default="cash", validation_alias=AliasChoices("payment_method", "paymentMethod")
    )
