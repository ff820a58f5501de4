"""Tests for email notifications."""

import smtplib
from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from wishlist_tracker.config import Settings
from wishlist_tracker.models.wishlist_item import WishlistItem
from wishlist_tracker.services.notification_service import (
    EmailNotificationService,
    render_price_drop_email,
    render_restock_email,
)

SMTP_PATH = "wishlist_tracker.services.notification_service.smtplib"


@pytest.fixture
def item() -> WishlistItem:
    return WishlistItem(
        id=uuid4(),
        title="Linen <Blend> Shirt",
        brand="ZARA",
        price=Decimal("80.00"),
        currency="$",
        url="https://www.zara.com/us/en/linen-shirt-p01.html",
        images=["https://static.zara.net/linen.jpg"],
    )


def email_settings(**overrides) -> Settings:
    values = {
        "EMAIL_HOST": "smtp.example.com",
        "EMAIL_PORT": 587,
        "EMAIL_USER": "tracker@example.com",
        "EMAIL_PASS": "app-password",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestRendering:
    """Tests for the email templates."""

    def test_price_drop(self, item):
        subject, html = render_price_drop_email(
            item, Decimal("100.00"), Decimal("80.00"), Decimal("-20.00")
        )

        assert subject == "🎉 Price Drop Alert: Linen <Blend> Shirt"
        assert "Was: $100.00" in html
        assert "Now: $80.00" in html
        assert "Save 20.0%!" in html
        assert item.url in html

    def test_markup_is_escaped(self, item):
        _, html = render_restock_email(item)

        assert "Linen &lt;Blend&gt; Shirt" in html
        assert "<Blend>" not in html

    def test_restock(self, item):
        subject, html = render_restock_email(item)

        assert subject == "🔔 Back in Stock: Linen <Blend> Shirt"
        assert "back in stock" in html
        assert "$80.00" in html


class TestEmailNotificationService:
    """Tests for EmailNotificationService."""

    async def test_disabled_without_smtp_settings(self, item):
        service = EmailNotificationService(Settings(_env_file=None, EMAIL_HOST=""))

        with patch(SMTP_PATH) as smtp:
            sent = await service.notify_restock(item)

        assert service.enabled is False
        assert sent is False
        smtp.SMTP.assert_not_called()

    async def test_sends_with_starttls(self, item):
        service = EmailNotificationService(email_settings(NOTIFICATION_EMAIL="me@example.com"))

        with patch(f"{SMTP_PATH}.SMTP") as smtp_cls:
            sent = await service.notify_price_drop(
                item, Decimal("100.00"), Decimal("80.00"), Decimal("-20.00")
            )

        assert sent is True
        smtp_cls.assert_called_once_with("smtp.example.com", 587)
        smtp = smtp_cls.return_value
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("tracker@example.com", "app-password")
        message = smtp.send_message.call_args.args[0]
        assert message["To"] == "me@example.com"
        assert message["From"] == "tracker@example.com"
        assert message["Subject"].startswith("🎉 Price Drop Alert")

    async def test_implicit_tls(self, item):
        service = EmailNotificationService(email_settings(EMAIL_PORT=465, EMAIL_SECURE=True))

        with patch(f"{SMTP_PATH}.SMTP_SSL") as smtp_cls:
            sent = await service.notify_restock(item)

        assert sent is True
        smtp_cls.return_value.starttls.assert_not_called()
        message = smtp_cls.return_value.send_message.call_args.args[0]
        assert message["To"] == "tracker@example.com"

    @pytest.mark.parametrize(
        "error",
        [smtplib.SMTPAuthenticationError(535, b"bad credentials"), ConnectionRefusedError()],
    )
    async def test_delivery_failure_returns_false(self, item, error):
        service = EmailNotificationService(email_settings())
        smtp_cls = MagicMock(side_effect=error)

        with patch(f"{SMTP_PATH}.SMTP", smtp_cls):
            sent = await service.notify_restock(item)

        assert sent is False
