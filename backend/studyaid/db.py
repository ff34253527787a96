from __future__ import annotations
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


DEFAULT_DATABASE_URL = "sqlite:///./studyaid.db"

Base = declarative_base()


def make_engine(database_url: Optional[str] = None) -> Engine:
	url = database_url or settings.database_url or DEFAULT_DATABASE_URL
	connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
	return create_engine(url, connect_args=connect_args, future=True)


def make_session_factory(engine: Engine) -> sessionmaker:
	# Tables are tiny; create them on first use instead of shipping migrations
	Base.metadata.create_all(bind=engine)
	return sessionmaker(autoflush=False, bind=engine, future=True)
