# catering/models/client.py

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from catering.utils.database import Base

class Client(Base):
    __tablename__ = "clients"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)  # автоинкремент
    first_name = Column(String(100), nullable=False)
    last_name  = Column(String(100), nullable=False)
    phone      = Column(String(30), nullable=True)
    email      = Column(String(150), unique=True, nullable=True)
    address    = Column(Text, nullable=True)
    city       = Column(String(100), nullable=True)
    is_active  = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)
