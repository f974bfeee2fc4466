# models/expense_category.py

from typing import Optional
from pydantic import BaseModel, Field


class ExpenseCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class ExpenseCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
