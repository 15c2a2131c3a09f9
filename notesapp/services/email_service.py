"""
Notes Backend - Email Service (OTP delivery)
=============================================

What:  Renders and sends the signup and login passcode emails.
How:   smtplib + email.message.EmailMessage (HTML part with a plain-text
       alternative), STARTTLS when configured. smtplib blocks, so each send
       runs on the threadpool.
Who:   AuthService after a passcode has been issued.

Development Mode:
    With SMTP_HOST unset nothing is sent; the code is written to the log so a
    developer can complete the flow locally.

Failure Policy:
    Any SMTP or socket error raises EmailDeliveryError (500). No retry; the
    user asks for a new code.
"""

import html
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from starlette.concurrency import run_in_threadpool

from notesapp.config import Settings
from notesapp.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    """j***@example.com style masking for log lines."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


# ── Templates ─────────────────────────────────────────────────────────────
_HTML_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">{heading}</h2>
  {greeting}
  <p>{intro}</p>
  <div style="background: #f5f5f5; padding: 20px; text-align: center; margin: 20px 0;">
    <h1 style="color: {accent}; font-size: 2.5em; margin: 0;">{code}</h1>
  </div>
  <p><strong>This OTP will expire in {minutes} minutes.</strong></p>
  <p>If you didn't request this, please ignore this email.</p>
  <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
  <p style="color: #666; font-size: 0.9em;">Best regards,<br>{app_name} Team</p>
</div>
"""

_TEXT_TEMPLATE = """\
{heading}

{intro}

    {code}

This OTP will expire in {minutes} minutes.
If you didn't request this, please ignore this email.

{app_name} Team
"""


class EmailService:
    """Sends passcode emails through the configured SMTP relay."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return self.settings.mail_enabled

    async def send_signup_otp(self, email: str, name: str, code: str) -> None:
        app_name = self.settings.mail_from_name
        fields = {
            "heading": f"Welcome to {app_name}!",
            "intro": "Thanks for signing up! Please use the following OTP to complete your registration:",
            "code": code,
            "minutes": self.settings.otp_expire_minutes,
            "app_name": app_name,
        }
        await self._deliver(
            to=email,
            subject="Complete Your Signup - OTP Verification",
            html_body=_HTML_TEMPLATE.format(greeting=f"<p>Hi {html.escape(name)},</p>", accent="#4CAF50", **fields),
            text_body=f"Hi {name},\n\n" + _TEXT_TEMPLATE.format(**fields),
            code=code,
        )

    async def send_login_otp(self, email: str, code: str) -> None:
        app_name = self.settings.mail_from_name
        fields = {
            "heading": f"Login to {app_name}",
            "intro": "Here's your login OTP:",
            "code": code,
            "minutes": self.settings.otp_expire_minutes,
            "app_name": app_name,
        }
        await self._deliver(
            to=email,
            subject=f"Login OTP - {app_name}",
            html_body=_HTML_TEMPLATE.format(greeting="", accent="#2196F3", **fields),
            text_body=_TEXT_TEMPLATE.format(**fields),
            code=code,
        )

    # ── Transport ─────────────────────────────────────────────────────────
    def build_message(self, to: str, subject: str, html_body: str, text_body: Optional[str]) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self.settings.mail_from_name, self.settings.mail_from_address))
        msg["To"] = to
        if text_body:
            msg.set_content(text_body)
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _send_sync(self, msg: EmailMessage) -> None:
        s = self.settings
        with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout) as smtp:
            if s.smtp_use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if s.smtp_user and s.smtp_password:
                smtp.login(s.smtp_user, s.smtp_password)
            smtp.send_message(msg)

    async def _deliver(self, to: str, subject: str, html_body: str, text_body: str, code: str) -> None:
        if not self.enabled:
            logger.warning("[DEV MODE] SMTP not configured. OTP for %s: %s", mask_email(to), code)
            return

        msg = self.build_message(to, subject, html_body, text_body)
        try:
            await run_in_threadpool(self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email delivery to %s failed: %s", mask_email(to), type(e).__name__)
            raise EmailDeliveryError(context={"error_type": type(e).__name__})

        logger.info("OTP email sent to %s", mask_email(to))
