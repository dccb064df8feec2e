from configurator.database.base import Base
from configurator.database.engine import engine, install_sqlite_pragmas
from configurator.database.session import SessionLocal

__all__ = ["Base", "engine", "install_sqlite_pragmas", "SessionLocal"]
