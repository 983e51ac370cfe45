from ibdaily.db.base import Base
from ibdaily.db.session import SessionLocal, engine

__all__ = ["Base", "SessionLocal", "engine"]
