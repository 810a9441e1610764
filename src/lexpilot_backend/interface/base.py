from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, Field

# resource -> action -> granted
PermissionMatrix = Dict[str, Dict[str, bool]]


class ListQuery(BaseModel):
    skip: Optional[int] = 0
    limit: Optional[int] = 100


class BaseEntityList(BaseModel):
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Update timestamp")
