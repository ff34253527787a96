from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text
from .db import Base


class StorageRecord(Base):
	__tablename__ = "storage_records"
	# One row per storage key, mirroring a browser localStorage entry
	key = Column(String(128), primary_key=True, index=True)
	value = Column(Text, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
