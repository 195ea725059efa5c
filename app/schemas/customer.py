from typing import Optional, Literal
from pydantic import BaseModel, Field, AliasChoices


class CustomerRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    phone: str
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address: Optional[str] = None


class UpdateCustomerRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = None
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    address: Optional[str] = None


class DuePaymentRequest(BaseModel):
    amount: float = Field(gt=0, allow_inf_nan=False)
    payment_method: Literal["cash", "card", "upi"] = Field(default="cash",
                                validation_alias=AliasChoices("payment_method", "paymentMethod"))
    description: Optional[str] = None
