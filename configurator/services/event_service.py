import hashlib
import hmac
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Optional
from urllib import error, request
from urllib.parse import urlparse

from configurator.config import Settings, get_settings

_ALLOWED_HTTP_SCHEMES = {"http", "https"}


def _validate_webhook_url(url):
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in _ALLOWED_HTTP_SCHEMES or not parsed.netloc:
        raise RuntimeError("WEBHOOK_URL must be an absolute HTTP(S) URL")
    return url


def validate_webhook_url(url):
    return _validate_webhook_url(url)


def sign_payload(payload: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return "sha256={}".format(digest)


def build_envelope(event_type: str, data: dict, *, occurred_at: Optional[datetime] = None) -> dict:
    occurred_at = occurred_at or datetime.now(timezone.utc)
    return {
        "event": event_type,
        "occurred_at": occurred_at.isoformat(),
        "data": data,
    }


class EventPublisher:
    """Fire-and-forget sink for domain events; the default drops them."""

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def publish(self, event_type: str, data: dict) -> None:
        self.logger.debug("Event %s dropped (no webhook configured).", event_type)


class WebhookEventPublisher(EventPublisher):
    def __init__(
        self,
        url: str,
        *,
        secret: Optional[str] = None,
        timeout_seconds: int = 10,
        run_in_thread: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger=logger)
        self.url = _validate_webhook_url(url)
        self.secret = secret or ""
        self.timeout_seconds = timeout_seconds
        self.run_in_thread = run_in_thread

    def build_request(self, event_type: str, data: dict) -> request.Request:
        body = json.dumps(build_envelope(event_type, data), default=str).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "X-Webhook-Event": event_type,
        }
        if self.secret:
            headers["X-Webhook-Signature"] = sign_payload(body, self.secret)
        return request.Request(self.url, data=body, method="POST", headers=headers)

    def publish(self, event_type: str, data: dict) -> None:
        req = self.build_request(event_type, data)
        if self.run_in_thread:
            threading.Thread(
                target=self._deliver,
                args=(event_type, req),
                name="webhook-{}".format(event_type),
                daemon=True,
            ).start()
        else:
            self._deliver(event_type, req)

    def _deliver(self, event_type: str, req: request.Request) -> None:
        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:  # nosec B310
                status_code = response.getcode()
            if status_code < 200 or status_code >= 300:
                self.logger.warning("Webhook %s rejected: HTTP %s", event_type, status_code)
                return
            self.logger.info("Webhook %s delivered.", event_type)
        except error.HTTPError as exc:
            self.logger.warning("Webhook %s rejected: HTTP %s", event_type, exc.code)
        except (error.URLError, OSError) as exc:
            self.logger.warning("Webhook %s delivery failed: %s", event_type, exc)


def build_event_publisher(settings: Optional[Settings] = None) -> EventPublisher:
    settings = settings or get_settings()
    url = (settings.WEBHOOK_URL or "").strip()
    if not url:
        return EventPublisher()
    return WebhookEventPublisher(
        url,
        secret=(settings.WEBHOOK_SECRET or "").strip() or None,
        timeout_seconds=settings.WEBHOOK_TIMEOUT_SECONDS,
    )


__all__ = [
    "EventPublisher",
    "WebhookEventPublisher",
    "build_envelope",
    "build_event_publisher",
    "sign_payload",
    "validate_webhook_url",
]
