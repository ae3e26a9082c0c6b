from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.ext.mutable import MutableDict
from datetime import datetime

from sigil.database import Base


class UserDocument(Base):
    """One row per user; the whole tracker state lives in `data` (camelCase JSON)."""
    __tablename__ = "user_documents"

    user_id = Column(String, primary_key=True, index=True)
    data = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
