"""Test contact form intake and the admin message list."""

import asyncio
from email.errors import HeaderParseError
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from app.core.exceptions import EmailDeliveryError
from app.db.models import ContactMessage
from app.schemas.contact import ContactMessageCreate
from app.services.contact_service import ContactService
from app.services.email_service import ContactNotifier

from conftest import RecordingNotifier

API = "/api/v1"


def contact_payload(**overrides):
    data = {
        "name": "Ivan Petrov",
        "email": "ivan@example.com",
        "phone": "+7 900 000-00-00",
        "subject": "Bulk order",
        "message": "Need 20 kitchen scales",
    }
    data.update(overrides)
    return data


class TestContactService:
    def test_submit_persists_and_notifies(self, db_session):
        notifier = RecordingNotifier()
        service = ContactService(db_session, notifier)

        message = asyncio.run(service.submit(ContactMessageCreate(**contact_payload())))

        assert message.id is not None
        assert message.created_at is not None
        assert notifier.notified == [message.id]

    def test_email_failure_keeps_message(self, db_session, caplog):
        service = ContactService(db_session, RecordingNotifier(fail=True))

        message = asyncio.run(service.submit(ContactMessageCreate(**contact_payload())))

        assert db_session.get(ContactMessage, message.id) is not None
        assert "Notification for contact message" in caplog.text

    def test_unsendable_subject_keeps_message(self, db_session, caplog):
        # Rows written before the subject check still reach the notifier
        data = ContactMessageCreate.model_construct(
            **contact_payload(subject="Order\nBcc: victim@example.com")
        )
        service = ContactService(db_session, ContactNotifier(smtp_host="smtp.test"))
        failing = AsyncMock(side_effect=HeaderParseError("embedded header"))

        with patch("app.services.email_service.aiosmtplib.send", new=failing):
            message = asyncio.run(service.submit(data))

        assert db_session.get(ContactMessage, message.id) is not None
        assert "Notification for contact message" in caplog.text

    def test_list_messages_paginates_newest_first(self, db_session):
        service = ContactService(db_session, RecordingNotifier())
        for n in range(3):
            asyncio.run(
                service.submit(ContactMessageCreate(**contact_payload(subject=f"Subject {n}")))
            )

        items, total = service.list_messages(page=1, page_size=2)
        assert total == 3
        assert [m.subject for m in items] == ["Subject 2", "Subject 1"]

        items, _ = service.list_messages(page=2, page_size=2)
        assert [m.subject for m in items] == ["Subject 0"]


class TestContactNotifier:
    def contact(self, **overrides):
        return SimpleNamespace(id=1, **contact_payload(**overrides))

    def test_disabled_without_smtp_host(self):
        notifier = ContactNotifier(smtp_host=None)
        assert asyncio.run(notifier.notify(self.contact())) is False

    def test_sends_company_mail_and_auto_reply(self):
        notifier = ContactNotifier(smtp_host="smtp.test", company_email="sales@test")
        with patch("app.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
            assert asyncio.run(notifier.notify(self.contact())) is True

        recipients = [call.args[0]["To"] for call in send.await_args_list]
        assert recipients == ["sales@test", "ivan@example.com"]

    def test_auto_reply_can_be_disabled(self):
        notifier = ContactNotifier(smtp_host="smtp.test", auto_reply=False)
        with patch("app.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
            asyncio.run(notifier.notify(self.contact()))
        assert send.await_count == 1

    def test_smtp_failure_raises_delivery_error(self):
        notifier = ContactNotifier(smtp_host="smtp.test")
        failing = AsyncMock(side_effect=aiosmtplib.SMTPException("boom"))
        with patch("app.services.email_service.aiosmtplib.send", new=failing):
            with pytest.raises(EmailDeliveryError):
                asyncio.run(notifier.notify(self.contact()))

    @pytest.mark.parametrize(
        "error", [HeaderParseError("embedded header"), ValueError("linefeed in header")]
    )
    def test_malformed_message_raises_delivery_error(self, error):
        notifier = ContactNotifier(smtp_host="smtp.test")
        with patch(
            "app.services.email_service.aiosmtplib.send", new=AsyncMock(side_effect=error)
        ):
            with pytest.raises(EmailDeliveryError):
                asyncio.run(notifier.notify(self.contact(subject="Order\nBcc: x@example.com")))

    def test_user_input_is_escaped(self):
        notifier = ContactNotifier(smtp_host="smtp.test")
        msg = notifier.company_notification(self.contact(message="<script>x</script>"))
        body = msg.get_payload()[0].get_payload(decode=True).decode("utf-8")
        assert "<script>" not in body
        assert "&lt;script&gt;" in body


class TestContactEndpoints:
    def test_submit(self, client, notifier):
        response = client.post(f"{API}/contact", json=contact_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Message sent successfully"
        assert body["data"]["email"] == "ivan@example.com"
        assert notifier.notified == [body["data"]["id"]]

    def test_submit_succeeds_when_email_fails(self, client, notifier, admin_headers):
        notifier.fail = True
        response = client.post(f"{API}/contact", json=contact_payload())
        assert response.status_code == 201

        listed = client.get(f"{API}/admin/contacts", headers=admin_headers).json()
        assert listed["meta"]["total"] == 1

    @pytest.mark.parametrize(
        "field,value", [("email", "not-an-email"), ("name", "   "), ("message", "")]
    )
    def test_invalid_fields_rejected(self, client, field, value):
        response = client.post(f"{API}/contact", json=contact_payload(**{field: value}))
        assert response.status_code == 422
        assert field in response.json()["detail"]

    @pytest.mark.parametrize("field", ["subject", "name", "phone"])
    def test_multiline_header_fields_rejected(self, client, notifier, field):
        payload = contact_payload(**{field: "Order\r\nBcc: victim@example.com"})
        response = client.post(f"{API}/contact", json=payload)
        assert response.status_code == 422
        assert field in response.json()["detail"]
        assert notifier.notified == []

    def test_admin_list_meta(self, client, admin_headers):
        for n in range(3):
            client.post(f"{API}/contact", json=contact_payload(subject=f"S{n}"))

        response = client.get(
            f"{API}/admin/contacts", params={"page": 2, "page_size": 2}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["meta"] == {"page": 2, "page_size": 2, "total": 3, "total_pages": 2}
        assert len(body["items"]) == 1
