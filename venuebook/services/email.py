"""
Email service: booking confirmations and password resets via SMTP.

In development (no SMTP configured), emails are logged instead so you
can see what *would* be sent without configuring a mail server.
"""

from __future__ import annotations

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from venuebook.config import (
    PASSWORD_RESET_TTL_MINUTES,
    PUBLIC_BASE_URL,
    SMTP_FROM_EMAIL,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
    smtp_enabled,
)
from venuebook.models import Booking, Venue

logger = logging.getLogger(__name__)


def _booking_summary(venue: Venue, booking: Booking) -> str:
    """One-line human-readable summary of a booking."""
    day = booking.date.strftime("%a %d %b %Y")
    end = f"–{booking.end_time}" if booking.end_time else ""
    return (
        f"{venue.name} · {day} {booking.time}{end}"
        f" · {booking.duration}h · ${booking.total_price:.2f}"
    )


def _build_booking_html(title: str, intro: str, venue: Venue, booking: Booking) -> str:
    """Build a simple HTML email body describing a booking. Every value is HTML-escaped."""
    rows = [
        ("Venue", venue.name),
        ("Location", venue.location),
        ("Date", booking.date.strftime("%a %d %b %Y")),
        ("Time", f"{booking.time} ({booking.duration}h)"),
        ("Customer", f"{booking.customer_name} · {booking.customer_email} · {booking.customer_phone}"),
        ("Total", f"${booking.total_price:.2f}"),
        ("Booking ID", booking.id),
    ]
    if booking.guests:
        rows.insert(4, ("Guests", str(booking.guests)))
    if booking.notes:
        rows.append(("Notes", booking.notes))

    body_rows = "".join(
        f'<tr><td style="color:#888">{label}</td><td>{escape(value)}</td></tr>'
        for label, value in rows
    )
    return f"""
    <html>
    <body style="font-family:sans-serif;color:#333">
      <h2>{escape(title)}</h2>
      <p>{escape(intro)}</p>
      <table border="0" cellpadding="6" cellspacing="0"
             style="border-collapse:collapse;border:1px solid #ddd">
        <tbody>{body_rows}</tbody>
      </table>
    </body>
    </html>
    """


async def send_email(to_email: str, subject: str, plain: str, html: str | None = None) -> None:
    """
    Send (or log) one email.

    If SMTP is not configured, falls back to logging.  SMTP failures are
    logged and re-raised.
    """
    # ── Log fallback (dev mode) ───────────────────────────────────────
    if not smtp_enabled():
        logger.info(
            "📧 [DEV] Would send email to %s:\n  Subject: %s\n%s",
            to_email,
            subject,
            "\n".join(f"    {line}" for line in plain.splitlines()),
        )
        return

    # ── Real SMTP send ────────────────────────────────────────────────
    import aiosmtplib

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = SMTP_FROM_EMAIL
    msg["To"] = to_email
    msg.attach(MIMEText(plain, "plain"))
    if html:
        msg.attach(MIMEText(html, "html"))

    try:
        await aiosmtplib.send(
            msg,
            hostname=SMTP_HOST,
            port=SMTP_PORT,
            username=SMTP_USERNAME,
            password=SMTP_PASSWORD,
            start_tls=SMTP_USE_TLS,
        )
        logger.info("Email sent to %s: %s", to_email, subject)
    except Exception:
        logger.exception("Failed to send email to %s", to_email)
        raise


async def send_booking_emails(venue: Venue, booking: Booking) -> None:
    """Confirmation to the customer, notification to the venue owner."""
    summary = _booking_summary(venue, booking)

    await send_email(
        booking.customer_email,
        f"Booking Confirmation - {venue.name}",
        f"Hi {booking.customer_name}, your booking is confirmed:\n{summary}",
        _build_booking_html(
            "Booking confirmed",
            f"Hi {booking.customer_name}, your booking is confirmed.",
            venue,
            booking,
        ),
    )
    await send_email(
        venue.owner.email,
        f"New Booking - {venue.name}",
        f"New booking from {booking.customer_name}:\n{summary}",
        _build_booking_html(
            "New booking received",
            f"{booking.customer_name} booked {venue.name}.",
            venue,
            booking,
        ),
    )


async def send_password_reset_email(to_email: str, token: str) -> None:
    reset_url = f"{PUBLIC_BASE_URL}/superadmin/reset-password?token={token}"
    await send_email(
        to_email,
        "Password reset",
        (
            f"Use this link to reset your password:\n{reset_url}\n\n"
            f"It expires in {PASSWORD_RESET_TTL_MINUTES} minutes. "
            "If you did not ask for a reset, ignore this email."
        ),
    )
