from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from lexpilot_backend.interface.base import BaseEntityList, ListQuery, PermissionMatrix


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255, description="Globally unique role name (case-sensitive)")
    description: Optional[str] = Field(None, description="Role description")
    permissions: PermissionMatrix = Field(default_factory=dict, description="resource -> action -> granted")
    is_active: bool = Field(True, description="Whether the role contributes permissions")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Role name must not be blank")
        return value


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    permissions: Optional[PermissionMatrix] = None
    is_active: Optional[bool] = None


class RoleGet(BaseEntityList):
    id: str = Field(description="Role unique identifier")
    name: str = Field(description="Role name")
    description: Optional[str] = Field(None, description="Role description")
    permissions: PermissionMatrix = Field(default_factory=dict)
    is_active: bool = Field(description="Whether the role is active")

    model_config = ConfigDict(from_attributes=True)


class RoleQuery(ListQuery):
    name: Optional[str] = Field(None, description="Filter by role name")
    is_active: Optional[bool] = Field(None, description="Filter by activation")
