# models/payment.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from models.enums import PaymentMethod


class PaymentCreate(BaseModel):
    apartment_id: str
    amount: float = Field(..., ge=0.01)
    payment_date: date
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(None, ge=0.01)
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
