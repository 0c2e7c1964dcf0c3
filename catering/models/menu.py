# catering/models/menu.py

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Numeric
from catering.utils.database import Base

class Menu(Base):
    __tablename__ = "menus"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)  # автоинкремент
    name        = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    unit_price  = Column(Numeric(10, 2), nullable=False)     # цена за одну порцию меню
    is_active   = Column(Boolean, nullable=False, default=True)
    created_at  = Column(DateTime, nullable=False, default=datetime.now)
    updated_at  = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)
