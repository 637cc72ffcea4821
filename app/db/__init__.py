from .base import Base
from .session import engine
# db/init_db.py

from app.models import *


def init_db(bind=engine):
    Base.metadata.create_all(bind=bind)
# Export for convenience
__all__ = ["Base", "engine", "init_db"]
