"""
Booking confirmation email.

Renders templates/booking_confirmation.html ({{placeholder}} replacement)
and sends it over SMTP. Sending never raises: callers get a result dict,
failures are logged.
"""

import logging
import smtplib
import ssl
from datetime import date
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from html import escape
from pathlib import Path
from typing import Optional

from ..config import Settings, settings as default_settings
from ..schemas.bookings import BookingRead

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).resolve().parents[1] / "templates" / "booking_confirmation.html"
SENDER_NAME = "HeyU 禾屿"
SMTP_TIMEOUT = 10


def format_date_human(value: Optional[str]) -> str:
    """'2024-01-05' → 'Friday, January 5, 2024'."""
    if not value:
        return ""
    try:
        d = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def format_time_12h(value: Optional[str]) -> str:
    """'18:00' → '6:00 PM'."""
    if not value or ":" not in value:
        return value or ""
    hours, minutes = value.split(":", 1)
    try:
        hour = int(hours)
    except ValueError:
        return value
    ampm = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display_hour}:{minutes} {ampm}"


def render_confirmation(booking: BookingRead, template: Optional[str] = None) -> str:
    if template is None:
        template = TEMPLATE_PATH.read_text(encoding="utf-8")

    service = booking.service or {}
    name_cn = service.get("nameCn") or service.get("name_cn") or ""
    name_en = service.get("nameEn") or service.get("name_en") or ""

    wechat_block = ""
    if booking.wechat:
        wechat_block = (
            '<div class="detail-item"><div class="label">WeChat ID</div>'
            f'<div class="value">{escape(booking.wechat)}</div></div>'
        )

    replacements = {
        "{{booking_id}}": escape(booking.booking_id or "N/A"),
        "{{service_name}}": escape(f"{name_cn} | {name_en}"),
        "{{date}}": escape(format_date_human(booking.selected_date)),
        "{{time}}": escape(format_time_12h(booking.selected_time)),
        "{{duration}}": escape(service.get("duration") or "N/A"),
        "{{price}}": escape(str(service.get("price") or "N/A")),
        "{{name}}": escape(booking.name or "N/A"),
        "{{wechat_name}}": escape(booking.wechat_name or "N/A"),
        "{{phone}}": escape(booking.phone or "N/A"),
        "{{email}}": escape(booking.email or "N/A"),
        "{{wechat_block}}": wechat_block,
    }

    html = template
    for placeholder, value in replacements.items():
        html = html.replace(placeholder, value)
    return html


def build_message(booking: BookingRead, cfg: Settings) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = f"{SENDER_NAME} - Booking Confirmation #{booking.booking_id or ''}"
    msg["From"] = formataddr((SENDER_NAME, cfg.smtp_from or cfg.smtp_user))
    msg["To"] = booking.email
    msg["Message-ID"] = make_msgid(domain="heyu")
    msg.set_content(
        f"Your booking {booking.booking_id} on {booking.selected_date} "
        f"at {booking.selected_time} is confirmed."
    )
    msg.add_alternative(render_confirmation(booking), subtype="html")
    return msg


def send_confirmation_email(booking: BookingRead, cfg: Optional[Settings] = None) -> dict:
    """
    Send the confirmation email.

    Returns:
        {"success": True, "message_id": ...} or {"success": False, ...}
    """
    cfg = cfg or default_settings

    if not cfg.smtp_configured:
        logger.warning("Email service not configured. Skipping email send.")
        return {"success": False, "message": "Email service not configured"}

    try:
        msg = build_message(booking, cfg)
        if cfg.smtp_secure:
            server = smtplib.SMTP_SSL(cfg.smtp_host, cfg.smtp_port, timeout=SMTP_TIMEOUT)
        else:
            server = smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=SMTP_TIMEOUT)

        with server:
            if not cfg.smtp_secure:
                server.starttls(context=ssl.create_default_context())
            server.login(cfg.smtp_user, cfg.smtp_pass)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send confirmation email for {booking.booking_id}: {e}")
        return {"success": False, "error": str(e)}

    message_id = msg.get("Message-ID")
    logger.info(f"Confirmation email sent for {booking.booking_id} to {booking.email}")
    return {"success": True, "message_id": message_id}


def smtp_status(cfg: Optional[Settings] = None) -> dict:
    """SMTP configuration summary with secrets masked."""
    cfg = cfg or default_settings
    return {
        "SMTP_HOST": "set" if cfg.smtp_host else "missing",
        "SMTP_PORT": cfg.smtp_port,
        "SMTP_USER": "set" if cfg.smtp_user else "missing",
        "SMTP_PASS": "set (hidden)" if cfg.smtp_pass else "missing",
        "SMTP_FROM": cfg.smtp_from or cfg.smtp_user or "not set",
        "SMTP_SECURE": cfg.smtp_secure,
    }
