# catering/schemas/menu.py

from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import datetime

class MenuBase(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    unit_price: Optional[Decimal] = None

class MenuCreate(MenuBase):
    name: str
    unit_price: Decimal
    is_active: bool = True

class Menu(MenuBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }
