# models/expense.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from models.enums import PaymentMethod, ShareType


class ExpenseCreate(BaseModel):
    category_id: str
    supplier_id: Optional[str] = None
    amount: float = Field(..., ge=0)
    description: str = Field(..., min_length=1)
    expense_date: date
    invoice_number: Optional[str] = None
    is_paid: bool = False
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    share_type: ShareType = ShareType.COMMON
    is_direct_charge: bool = False
    charged_apartment_id: Optional[str] = None
    notes: Optional[str] = None
    period_id: Optional[str] = None


class ExpenseUpdate(BaseModel):
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    expense_date: Optional[date] = None
    invoice_number: Optional[str] = None
    is_paid: Optional[bool] = None
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    share_type: Optional[ShareType] = None
    is_direct_charge: Optional[bool] = None
    charged_apartment_id: Optional[str] = None
    notes: Optional[str] = None
