"""Best-effort outbound email for invitation notifications."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from email.message import EmailMessage
from html import escape
from typing import Any, Callable, Dict, Mapping, Sequence, Tuple

import aiosmtplib
from fastapi import BackgroundTasks

from app.obs import metrics as obs_metrics
from app.settings import settings

logger = logging.getLogger(__name__)

FRIEND_INVITATION = "invitation/friendInvitation"
EVENT_INVITATION = "invitation/eventInvitation"

# (to_address, subject, template_key, data)
Outgoing = Tuple[str, str, str, Mapping[str, Any]]


def mask_email(email: str) -> str:
    masked = hashlib.sha256(email.lower().encode("utf-8")).hexdigest()
    return masked[:12]


def _field(data: Mapping[str, Any], key: str, default: str = "") -> str:
    value = data.get(key)
    return escape(str(value)) if value not in (None, "") else default


def _layout(title: str, inner: str, link: str, cta: str) -> str:
    return f"""
    <html>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; color: #1f1a38;">
            <div style="max-width: 500px; margin: 0 auto; padding: 24px;">
                <h2 style="color: #2d2a8d; margin-bottom: 16px;">{title}</h2>
                {inner}
                <p style="margin: 24px 0;">
                    <a href="{link}"
                       style="display: inline-block; background-color: #3b2e7a; color: white; padding: 12px 24px; text-decoration: none; border-radius: 8px; font-weight: 600;">
                        {cta}
                    </a>
                </p>
            </div>
        </body>
    </html>
    """


def _render_friend_invitation(data: Mapping[str, Any]) -> str:
    sender = _field(data, "userFirstname", "Someone")
    sender_email = _field(data, "userEmail")
    label = f"{sender} ({sender_email})" if sender_email else sender
    inner = f"<p><strong>{label}</strong> would like to be your friend on Evift.</p>"
    return _layout("You have a new friend request!", inner, f"{settings.public_app_url}/friends", "View request")


def _render_event_invitation(data: Mapping[str, Any]) -> str:
    organizer = " ".join(
        part for part in (_field(data, "organizerFirstname"), _field(data, "organizerLastname")) if part
    ) or "A friend"
    inner = f"""
                <p><strong>{organizer}</strong> invited you to <strong>{_field(data, "eventTitle", "an event")}</strong>.</p>
                <p>{_field(data, "eventDate")} {_field(data, "eventTime")}<br/>{_field(data, "eventLocation")}</p>
                <p style="color: #666; font-size: 14px;">{_field(data, "eventDescription")}</p>
    """
    return _layout("You're invited!", inner, f"{settings.public_app_url}/events", "View invitation")


_TEMPLATES: Dict[str, Callable[[Mapping[str, Any]], str]] = {
    FRIEND_INVITATION: _render_friend_invitation,
    EVENT_INVITATION: _render_event_invitation,
}


def render(template_key: str, data: Mapping[str, Any]) -> str:
    try:
        renderer = _TEMPLATES[template_key]
    except KeyError:
        raise ValueError(f"unknown_template:{template_key}") from None
    return renderer(data)


async def _deliver(msg: EmailMessage) -> None:
    # STARTTLS on 587, implicit TLS on 465.
    start_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 587
    use_tls = bool(settings.smtp_tls) and int(settings.smtp_port) == 465
    await aiosmtplib.send(
        msg,
        hostname=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        start_tls=start_tls,
        use_tls=use_tls,
    )


async def send(to_address: str, subject: str, template_key: str, data: Mapping[str, Any]) -> None:
    """Render and deliver one email. Never raises: failures are logged and counted."""
    if not to_address:
        obs_metrics.inc_email(template_key, "skipped")
        return
    if not settings.smtp_host or (settings.smtp_host == "localhost" and not settings.is_dev()):
        logger.warning("SMTP not configured, skipping email to %s", mask_email(to_address))
        obs_metrics.inc_email(template_key, "skipped")
        return
    try:
        msg = EmailMessage()
        msg["From"] = settings.smtp_from_email
        msg["To"] = to_address
        msg["Subject"] = subject
        msg.set_content(render(template_key, data), subtype="html")
        await _deliver(msg)
    except Exception as exc:
        logger.error("Failed to send %s email to %s: %s", template_key, mask_email(to_address), str(exc))
        obs_metrics.inc_email(template_key, "failed")
        return
    logger.info("Email %s sent to %s", template_key, mask_email(to_address))
    obs_metrics.inc_email(template_key, "sent")


async def send_all(messages: Sequence[Outgoing]) -> None:
    await asyncio.gather(*(send(*message) for message in messages))


async def dispatch(messages: Sequence[Outgoing], *, background: BackgroundTasks | None = None) -> None:
    """Hand the messages to ``background`` to go out after the response; without one, deliver before returning."""
    if not messages:
        return
    if background is None:
        await send_all(messages)
        return
    background.add_task(send_all, list(messages))
