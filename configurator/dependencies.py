from typing import Optional

from fastapi import Header, Request

from configurator.config import get_settings
from configurator.core.security import authenticate_request
from configurator.database.session import get_db
from configurator.services.event_service import EventPublisher, build_event_publisher


def require_auth(
    request: Request,
    api_key_alt: Optional[str] = Header(None, alias="api-key"),
    authorization: Optional[str] = Header(None),
):
    api_key_value = request.headers.get(get_settings().API_KEY_HEADER) or api_key_alt
    return authenticate_request(
        api_key=api_key_value,
        authorization=authorization,
        require_auth=True,
    )


def get_events(request: Request) -> EventPublisher:
    publisher = getattr(request.app.state, "events", None)
    if publisher is None:
        publisher = build_event_publisher()
        request.app.state.events = publisher
    return publisher


__all__ = ["get_db", "get_events", "require_auth"]
