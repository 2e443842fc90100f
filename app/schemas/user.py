# app/schemas/user.py
from typing import Optional
from datetime import datetime
import uuid
from app.schemas.common import CamelModel

# Public fields returned on GET /users/me
class UserRead(CamelModel):
    id: uuid.UUID
    external_id: str
    name: str
    email: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
