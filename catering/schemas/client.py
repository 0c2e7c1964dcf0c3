# catering/schemas/client.py

from pydantic import BaseModel, computed_field
from typing import Optional
from datetime import datetime

from catering.utils import derived

# ────────────── Базовая схема ──────────────
class ClientBase(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None

# ────────────── Схема для CREATE ──────────────
class ClientCreate(ClientBase):
    first_name: str
    last_name: str
    is_active: bool = True

# ────────────── Схема для RESPONSE ──────────────
class Client(ClientBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }

    @computed_field
    @property
    def full_name(self) -> str:
        return derived.full_name(self.first_name, self.last_name)
