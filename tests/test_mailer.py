# =============================================================================
# tests/test_mailer.py - Email Delivery Tests
# =============================================================================
# Postmark is replaced by an httpx.MockTransport that records requests.
# =============================================================================

import json

import httpx
import pytest

from lib.email_templates import magic_link_email
from lib.mailer import POSTMARK_API_URL, EmailClient, EmailError, format_email_address


def postmark(handler=None):
    """EmailClient whose HTTP calls are captured in the returned list."""
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if handler:
            return handler(request)
        return httpx.Response(200, json={"MessageID": "abc", "ErrorCode": 0})

    http = httpx.Client(base_url=POSTMARK_API_URL, transport=httpx.MockTransport(record))
    return EmailClient(api_key="server-token", http_client=http), requests


class TestFormatEmailAddress:
    def test_without_name(self):
        assert format_email_address("a@acme.com") == "a@acme.com"

    def test_with_plain_name(self):
        assert format_email_address("a@acme.com", "Ada") == "Ada <a@acme.com>"

    def test_name_with_special_characters_is_quoted(self):
        assert format_email_address("a@acme.com", "Doe, Jane") == '"Doe, Jane" <a@acme.com>'


class TestSendEmail:
    """Tests for single sends."""

    def test_posts_to_postmark(self):
        client, requests = postmark()

        result = client.send_email(
            from_="hq@acme.com",
            to=["a@acme.com", "b@acme.com"],
            subject="Hi",
            text_body="Hello",
            tag="test",
        )

        assert result["MessageID"] == "abc"
        request = requests[0]
        assert request.url.path == "/email"
        assert request.headers["X-Postmark-Server-Token"] == "server-token"
        body = json.loads(request.content)
        assert body == {
            "From": "hq@acme.com",
            "To": "a@acme.com,b@acme.com",
            "Subject": "Hi",
            "TextBody": "Hello",
            "Tag": "test",
        }

    @pytest.mark.parametrize("kwargs", [
        {"from_": "", "to": "a@acme.com", "subject": "Hi", "text_body": "x"},
        {"from_": "hq@acme.com", "to": "", "subject": "Hi", "text_body": "x"},
        {"from_": "hq@acme.com", "to": "a@acme.com", "subject": "", "text_body": "x"},
        {"from_": "hq@acme.com", "to": "a@acme.com", "subject": "Hi"},
    ])
    def test_missing_fields_are_rejected(self, kwargs):
        client, requests = postmark()

        with pytest.raises(EmailError):
            client.send_email(**kwargs)

        assert requests == []

    def test_provider_error_raises(self):
        client, _ = postmark(lambda request: httpx.Response(422, json={"ErrorCode": 300}))

        with pytest.raises(EmailError) as exc_info:
            client.send_email(from_="hq@acme.com", to="a@acme.com", subject="Hi", text_body="x")

        assert exc_info.value.code == "EMAIL_SEND_FAILED"

    def test_missing_api_key_raises(self):
        client = EmailClient(api_key=None)

        with pytest.raises(EmailError) as exc_info:
            client.send_email(from_="hq@acme.com", to="a@acme.com", subject="Hi", text_body="x")

        assert exc_info.value.code == "EMAIL_NOT_CONFIGURED"

    def test_log_only_mode_does_not_send(self):
        requests = []
        http = httpx.Client(transport=httpx.MockTransport(lambda r: requests.append(r)))
        client = EmailClient(api_key=None, log_only=True, http_client=http)

        result = client.send_email(from_="hq@acme.com", to="a@acme.com", subject="Hi", text_body="x")

        assert result["ErrorCode"] == 0
        assert result["MessageID"].startswith("dev-")
        assert requests == []


class TestSendBulkEmails:
    def test_batch_is_posted_once(self):
        client, requests = postmark(lambda request: httpx.Response(200, json=[{"ErrorCode": 0}] * 2))
        messages = [
            {"from_": "hq@acme.com", "to": f"user{i}@acme.com", "subject": "Hi", "text_body": "x"}
            for i in range(2)
        ]

        result = client.send_bulk_emails(messages)

        assert len(result) == 2
        assert requests[0].url.path == "/email/batch"
        assert [m["To"] for m in json.loads(requests[0].content)] == ["user0@acme.com", "user1@acme.com"]

    def test_batch_limit(self):
        client, _ = postmark()
        message = {"from_": "hq@acme.com", "to": "a@acme.com", "subject": "Hi", "text_body": "x"}

        with pytest.raises(EmailError, match="500"):
            client.send_bulk_emails([message] * 501)

    def test_empty_batch(self):
        client, _ = postmark()

        with pytest.raises(EmailError):
            client.send_bulk_emails([])


class TestMagicLinkTemplate:
    def test_subject_and_bodies(self):
        url = "http://localhost:3000/auth/verify?token=abc&email=a%40acme.com"

        email = magic_link_email("a@acme.com", url, app_name="HQ", max_age_hours=24)

        assert email.subject == "Sign in to HQ"
        assert url in email.text_body
        assert "expire in 24 hours" in email.text_body
        assert "token=abc&amp;email=a%40acme.com" in email.html_body

    def test_html_is_escaped(self):
        email = magic_link_email("a@acme.com", "http://x", app_name="<b>HQ</b>")

        assert "<b>HQ</b>" not in email.html_body
        assert "&lt;b&gt;HQ&lt;/b&gt;" in email.html_body
