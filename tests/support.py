from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from configurator.config import Settings
from configurator.database.base import Base
from configurator.database.engine import install_sqlite_pragmas
from configurator.models import import_all_models


class RecordingPublisher:
    def __init__(self):
        self.events = []

    def publish(self, event_type, data):
        self.events.append((event_type, data))

    def of_type(self, event_type):
        return [data for kind, data in self.events if kind == event_type]


def make_settings(**overrides) -> Settings:
    values = {"DATABASE_URL": "sqlite://", "WEBHOOK_URL": None}
    values.update(overrides)
    return Settings(**values)


def make_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_sqlite_pragmas(engine, memory=True)
    import_all_models()
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return engine, Session()
