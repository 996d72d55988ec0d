"""
Best-effort customer notifications.

`BookingNotifications` fans a booking snapshot out to every configured sink.
A failing sink is logged as a `NotificationError` and otherwise ignored: it
never fails the booking operation that triggered it, and nothing is retried.
"""

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from .config import Settings
from .email_templates import booking_confirmation_template, status_update_template
from .errors import NotificationError
from .events import BOOKING_CREATED, BOOKING_STATUS_CHANGED, booking_created_event, status_changed_event, to_json
from .rabbitmq import RabbitPublisher
from .schemas import BookingOut

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    name: str

    async def booking_created(self, booking: BookingOut) -> None: ...

    async def status_changed(self, booking: BookingOut, old_status: str) -> None: ...


class EmailNotifier:
    name = "email"

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.SMTP_FROM
        self.support_phone = settings.SUPPORT_PHONE
        self.support_email = settings.SUPPORT_EMAIL

    def _send(self, to: str, subject: str, html: str):
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.attach(MIMEText(html, "html"))

        context = ssl.create_default_context()
        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=30)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=30)

        with server:
            if self.port != 465 and self.user:
                server.starttls(context=context)
            if self.user:
                server.login(self.user, self.password)
            server.sendmail(self.sender, [to], msg.as_string())

        logger.info("Email %r sent to %s", subject, to)

    async def booking_created(self, booking: BookingOut) -> None:
        subject, html = booking_confirmation_template(booking, self.support_phone, self.support_email)
        await asyncio.to_thread(self._send, booking.email, subject, html)

    async def status_changed(self, booking: BookingOut, old_status: str) -> None:
        subject, html = status_update_template(
            booking, old_status, self.support_phone, self.support_email
        )
        await asyncio.to_thread(self._send, booking.email, subject, html)


class EventNotifier:
    name = "events"

    def __init__(self, publisher: RabbitPublisher):
        self.publisher = publisher

    async def booking_created(self, booking: BookingOut) -> None:
        event = booking_created_event(booking)
        await self.publisher.publish(BOOKING_CREATED, to_json(event), message_id=event["event_id"])

    async def status_changed(self, booking: BookingOut, old_status: str) -> None:
        event = status_changed_event(booking, old_status)
        await self.publisher.publish(BOOKING_STATUS_CHANGED, to_json(event), message_id=event["event_id"])


class BookingNotifications:
    def __init__(self, sinks: list[NotificationSink] | None = None):
        self.sinks = list(sinks or [])

    async def booking_created(self, booking: BookingOut) -> None:
        await self._dispatch("booking_created", booking)

    async def status_changed(self, booking: BookingOut, old_status: str) -> None:
        await self._dispatch("status_changed", booking, old_status)

    async def _dispatch(self, event: str, booking: BookingOut, *args) -> None:
        for sink in self.sinks:
            try:
                await getattr(sink, event)(booking, *args)
            except Exception as e:
                error = NotificationError(f"{sink.name} notification '{event}' failed for booking {booking.id}")
                logger.error("%s: %s", error, e, exc_info=True)


def build_notifications(settings: Settings, publisher: RabbitPublisher) -> BookingNotifications:
    sinks: list[NotificationSink] = []
    if settings.email_enabled:
        sinks.append(EmailNotifier(settings))
    else:
        logger.info("SMTP_HOST not set; booking emails disabled")
    if publisher.enabled:
        sinks.append(EventNotifier(publisher))
    return BookingNotifications(sinks)
