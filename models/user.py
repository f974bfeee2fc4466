# models/user.py

from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field

from models.enums import RoleName


# ===============================================================
# USER PROFILE MODELS (credentials live in Supabase Auth)
# ===============================================================

class UserCreate(BaseModel):
    """
    Used when a SUPER_ADMIN provisions an account.
    `role` / `building_id` create the first role binding.
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    is_active: bool = True
    role: Optional[RoleName] = None
    building_id: Optional[str] = None


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)


class RoleAssignment(BaseModel):
    role: RoleName
    building_id: Optional[str] = None   # None = global


class RoleBindingRead(BaseModel):
    role: RoleName
    building_id: Optional[str] = None


class MeRead(BaseModel):
    id: str
    email: str
    roles: List[RoleBindingRead]
