# core/roles.py

from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict

from models.enums import RoleName


class RoleBinding(BaseModel):
    """
    A (role, scope) grant held by a user.
    building_id None = global scope.
    """

    model_config = ConfigDict(frozen=True)

    role: RoleName
    building_id: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.building_id is None

    def covers(self, building_id: Optional[str]) -> bool:
        """True if this binding's scope includes the given building."""
        return self.is_global or building_id is None or self.building_id == building_id

    @classmethod
    def from_row(cls, row: dict) -> "RoleBinding":
        return cls(role=row["role"], building_id=row.get("building_id"))


class Actor(BaseModel):
    """
    Verified caller identity. Rebuilt per request from the credential
    verifier and the role binding store; never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    bindings: FrozenSet[RoleBinding] = frozenset()
