# catering/schemas/base.py

from pydantic import BaseModel, Field

class StatusChange(BaseModel):
    status: str = Field(..., description="Новый статус (строка из перечня статусов сущности)")
