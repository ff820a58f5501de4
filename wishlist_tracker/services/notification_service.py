"""Price drop and restock notifications.

Delivery is best-effort: every method reports success as a bool and never
raises, so a broken mail server cannot interrupt a price sweep.
"""

import asyncio
import smtplib
import ssl
from decimal import Decimal
from email.message import EmailMessage
from html import escape
from typing import Optional, Protocol

import structlog

from wishlist_tracker.config import Settings, settings
from wishlist_tracker.models.wishlist_item import WishlistItem

logger = structlog.get_logger(__name__)


class NotificationService(Protocol):
    async def notify_price_drop(
        self,
        item: WishlistItem,
        old_price: Decimal,
        new_price: Decimal,
        percent: Decimal,
    ) -> bool: ...

    async def notify_restock(self, item: WishlistItem) -> bool: ...


_BASE_STYLE = """
body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; border-radius: 10px 10px 0 0; }
.content { background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }
.price-box { background: white; padding: 20px; border-radius: 8px; margin: 20px 0; }
.old-price { text-decoration: line-through; color: #999; font-size: 18px; }
.new-price { color: #10b981; font-size: 28px; font-weight: bold; }
.savings { color: #10b981; font-size: 20px; font-weight: bold; }
.button { display: inline-block; background: #667eea; color: white; padding: 12px 30px; text-decoration: none; border-radius: 6px; margin-top: 20px; }
img { max-width: 100%; border-radius: 8px; margin: 20px 0; }
"""


def _item_header(item: WishlistItem) -> str:
    parts = [f"<h2>{escape(item.title)}</h2>"]
    if item.brand:
        parts.append(f"<p><strong>Brand:</strong> {escape(item.brand)}</p>")
    if item.images:
        parts.append(f'<img src="{escape(item.images[0])}" alt="{escape(item.title)}" />')
    return "\n".join(parts)


def _wrap(heading: str, body: str, footer: str) -> str:
    return f"""<!DOCTYPE html>
<html>
  <head><style>{_BASE_STYLE}</style></head>
  <body>
    <div class="container">
      <div class="header"><h1 style="margin: 0;">{heading}</h1></div>
      <div class="content">
        {body}
        <p style="margin-top: 30px; color: #666; font-size: 14px;">{footer}</p>
      </div>
    </div>
  </body>
</html>
"""


def render_price_drop_email(
    item: WishlistItem, old_price: Decimal, new_price: Decimal, percent: Decimal
) -> tuple[str, str]:
    """Build the (subject, html) pair for a price drop alert."""
    currency = escape(item.currency)
    body = f"""{_item_header(item)}
        <div class="price-box">
          <p class="old-price">Was: {currency}{old_price:.2f}</p>
          <p class="new-price">Now: {currency}{new_price:.2f}</p>
          <p class="savings">Save {abs(percent):.1f}%!</p>
        </div>
        <a href="{escape(item.url)}" class="button">View Product</a>"""
    html = _wrap(
        "🎉 Price Drop Alert!",
        body,
        "This price was detected by your automated wishlist tracker.",
    )
    return f"🎉 Price Drop Alert: {item.title}", html


def render_restock_email(item: WishlistItem) -> tuple[str, str]:
    """Build the (subject, html) pair for a back-in-stock alert."""
    body = f"""{_item_header(item)}
        <p style="font-size: 18px;">Good news! This item is now back in stock.</p>
        <p style="font-size: 24px; color: #667eea; font-weight: bold;">{escape(item.currency)}{item.price}</p>
        <a href="{escape(item.url)}" class="button">Buy Now</a>"""
    html = _wrap(
        "🔔 Item Back in Stock!",
        body,
        "This restock was detected by your automated wishlist tracker.",
    )
    return f"🔔 Back in Stock: {item.title}", html


class EmailNotificationService:
    """Sends alerts over SMTP.

    Disabled (every call returns False) unless host, user and password
    are configured. ``smtplib`` blocks, so sends run in a worker thread.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.logger = logger.bind(service="email_notifications")

    @property
    def enabled(self) -> bool:
        return self.config.email_enabled

    def _send_sync(self, message: EmailMessage) -> None:
        config = self.config
        if config.EMAIL_SECURE:
            smtp = smtplib.SMTP_SSL(
                config.EMAIL_HOST, config.EMAIL_PORT, context=ssl.create_default_context()
            )
        else:
            smtp = smtplib.SMTP(config.EMAIL_HOST, config.EMAIL_PORT)
        with smtp:
            if not config.EMAIL_SECURE:
                smtp.starttls(context=ssl.create_default_context())
            smtp.login(config.EMAIL_USER, config.EMAIL_PASS)
            smtp.send_message(message)

    async def _send(self, subject: str, html: str, kind: str, item: WishlistItem) -> bool:
        if not self.enabled:
            self.logger.info("email_disabled", reason="missing_smtp_configuration", kind=kind)
            return False

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.config.EMAIL_FROM or self.config.EMAIL_USER
        message["To"] = self.config.get_notification_recipient()
        message.set_content(subject)
        message.add_alternative(html, subtype="html")

        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(
                "email_send_failed",
                kind=kind,
                item_id=str(item.id),
                error=str(e),
                exc_info=True,
            )
            return False

        self.logger.info("email_sent", kind=kind, item_id=str(item.id), title=item.title[:50])
        return True

    async def notify_price_drop(
        self,
        item: WishlistItem,
        old_price: Decimal,
        new_price: Decimal,
        percent: Decimal,
    ) -> bool:
        subject, html = render_price_drop_email(item, old_price, new_price, percent)
        return await self._send(subject, html, "price_drop", item)

    async def notify_restock(self, item: WishlistItem) -> bool:
        subject, html = render_restock_email(item)
        return await self._send(subject, html, "restock", item)
