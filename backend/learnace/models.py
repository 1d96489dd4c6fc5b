from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from .db import Base


class StoredValue(Base):
	__tablename__ = "local_storage"
	# One row per local-storage key; values are the raw strings the client wrote
	key = Column(String(128), primary_key=True, index=True)
	value = Column(Text, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
