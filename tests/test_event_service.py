import hashlib
import hmac
import json
import unittest
from unittest.mock import MagicMock, patch
from urllib import error

from configurator.services.event_service import (
    EventPublisher,
    WebhookEventPublisher,
    build_event_publisher,
    sign_payload,
    validate_webhook_url,
)

from support import make_settings


class WebhookPublisherTest(unittest.TestCase):
    def test_signature_is_hmac_sha256_of_body(self):
        expected = hmac.new(b"s3cret", b"{}", hashlib.sha256).hexdigest()

        self.assertEqual(sign_payload(b"{}", "s3cret"), "sha256=" + expected)

    def test_request_carries_event_and_signature_headers(self):
        publisher = WebhookEventPublisher("https://hooks.example.com/in", secret="s3cret", run_in_thread=False)

        req = publisher.build_request("variant.generated", {"product_id": 3, "variant_ids": [7, 8]})

        body = json.loads(req.data.decode("utf-8"))
        self.assertEqual(body["event"], "variant.generated")
        self.assertEqual(body["data"], {"product_id": 3, "variant_ids": [7, 8]})
        self.assertEqual(req.get_method(), "POST")
        self.assertEqual(req.get_header("X-webhook-event"), "variant.generated")
        self.assertEqual(req.get_header("X-webhook-signature"), sign_payload(req.data, "s3cret"))

    def test_unsigned_when_no_secret(self):
        publisher = WebhookEventPublisher("https://hooks.example.com/in", run_in_thread=False)

        req = publisher.build_request("stock.low", {"raw_material_id": 1})

        self.assertIsNone(req.get_header("X-webhook-signature"))

    def test_publish_posts_once(self):
        publisher = WebhookEventPublisher("https://hooks.example.com/in", run_in_thread=False)
        response = MagicMock()
        response.__enter__.return_value.getcode.return_value = 204

        with patch("configurator.services.event_service.request.urlopen", return_value=response) as urlopen:
            publisher.publish("production.completed", {"batch_id": 1})

        self.assertEqual(urlopen.call_count, 1)

    def test_delivery_failure_is_logged_not_raised(self):
        publisher = WebhookEventPublisher("https://hooks.example.com/in", run_in_thread=False)

        with patch(
            "configurator.services.event_service.request.urlopen",
            side_effect=error.URLError("connection refused"),
        ):
            with self.assertLogs("configurator.services.event_service", level="WARNING"):
                publisher.publish("stock.low", {"raw_material_id": 1})

    def test_rejects_non_http_url(self):
        with self.assertRaises(RuntimeError):
            validate_webhook_url("file:///tmp/hook")

    def test_factory_without_url_drops_events(self):
        publisher = build_event_publisher(make_settings(WEBHOOK_URL=None))

        self.assertIs(type(publisher), EventPublisher)

    def test_factory_with_url(self):
        publisher = build_event_publisher(
            make_settings(WEBHOOK_URL="https://hooks.example.com/in", WEBHOOK_SECRET="abc", WEBHOOK_TIMEOUT_SECONDS=3)
        )

        self.assertIsInstance(publisher, WebhookEventPublisher)
        self.assertEqual(publisher.secret, "abc")
        self.assertEqual(publisher.timeout_seconds, 3)


if __name__ == "__main__":
    unittest.main()
