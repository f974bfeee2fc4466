# models/audit.py

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class AuditLogRead(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    entity: str
    entity_id: str
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class AuditLogPage(BaseModel):
    data: List[AuditLogRead]
    meta: Dict[str, int]
