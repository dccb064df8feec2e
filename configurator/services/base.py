import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from configurator.config import Settings, get_settings
from configurator.core.errors import Conflict, NotFound
from configurator.services.event_service import EventPublisher


class Service:
    """Session-bound service; settings, logger and event sink are injected."""

    def __init__(
        self,
        db: Session,
        *,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
        events: Optional[EventPublisher] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.logger = logger or logging.getLogger(type(self).__module__)
        self.events = events or EventPublisher(logger=self.logger)

    def _get(self, model, entity_id, entity_name: str):
        instance = self.db.get(model, entity_id)
        if instance is None:
            raise NotFound(entity_name, entity_id)
        return instance

    def _commit(self, conflict_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise Conflict(conflict_message) from exc


__all__ = ["Service"]
