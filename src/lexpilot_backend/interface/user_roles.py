from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional
from lexpilot_backend.interface.roles import RoleGet


class UserRoleCreate(BaseModel):
    user_id: str
    role_id: str
    assigned_by: Optional[str] = None


class UserRoleUpdate(BaseModel):
    is_active: Optional[bool] = None
    assigned_by: Optional[str] = None


class UserRoleGet(BaseModel):
    id: str
    user_id: str
    role_id: str
    assigned_by: Optional[str] = None
    assigned_at: Optional[datetime] = None
    is_active: bool
    role: Optional[RoleGet] = None

    model_config = ConfigDict(from_attributes=True)
