from typing import List
from pydantic import BaseModel, Field, field_validator


class UserPermissionSet(BaseModel):
    """Full replacement payload for a user's route-key overrides."""
    permission_keys: List[str] = Field(default_factory=list)

    @field_validator("permission_keys")
    @classmethod
    def strip_and_dedupe(cls, keys: List[str]) -> List[str]:
        seen = []
        for key in keys:
            key = key.strip()
            if not key:
                raise ValueError("Permission keys must not be blank")
            if key not in seen:
                seen.append(key)
        return seen


class UserPermissionList(BaseModel):
    user_id: str
    permission_keys: List[str]
