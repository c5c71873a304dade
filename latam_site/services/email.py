#  Latam Site - Email Service
#
#  Builds and sends the contact-form emails (admin notification + user
#  acknowledgment) over SMTP. smtplib is blocking, so each send runs in a
#  worker thread bounded by a timeout.
#
#  Depends on: config.py, exceptions.py, services/contact.py (ContactSubmission)
#  Used by:    container.py, services/contact.py, app.py

import asyncio
import html
import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

from latam_site.config import SITE_NAME
from latam_site.exceptions import DeliveryError

if TYPE_CHECKING:
    from latam_site.services.contact import ContactSubmission

logger = logging.getLogger("latam_site.email")

# Well-known EMAIL_SERVICE names -> (host, port). STARTTLS on all of them.
SMTP_SERVICES = {
    "gmail": ("smtp.gmail.com", 587),
    "outlook": ("smtp-mail.outlook.com", 587),
    "hotmail": ("smtp-mail.outlook.com", 587),
    "office365": ("smtp.office365.com", 587),
    "yahoo": ("smtp.mail.yahoo.com", 587),
    "zoho": ("smtp.zoho.com", 587),
}

_DELIVERY_FAILED = "No se pudo enviar el mensaje. Intenta nuevamente más tarde"

_STYLE = """
    body { font-family: 'Arial', sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f9f9f9; }
    .header { background-color: #002156; color: white; padding: 20px; text-align: center; border-radius: 5px 5px 0 0; }
    .content { background-color: white; padding: 30px; border-radius: 0 0 5px 5px; }
    .info-row { margin-bottom: 15px; padding-bottom: 15px; border-bottom: 1px solid #eee; }
    .label { font-weight: bold; color: #002156; }
    .highlight { color: #c19e5c; }
    .footer { margin-top: 20px; padding-top: 20px; border-top: 1px solid #eee; font-size: 12px; color: #666; }
"""


def _html_page(body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<style>{_STYLE}</style></head><body><div class=\"container\">{body}</div></body></html>"
    )


class EmailService:
    """SMTP delivery for contact-form submissions."""

    def __init__(
        self,
        user: str,
        password: str,
        service: str = "gmail",
        to: str | None = None,
        host: str | None = None,
        port: int | None = None,
        timeout: float = 15.0,
    ):
        self._user = user
        self._password = password
        self._to = to or user
        default_host, default_port = SMTP_SERVICES.get((service or "").lower(), ("", 587))
        self._host = host or default_host
        self._port = port or default_port
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._user and self._password and self._host)

    @property
    def recipient(self) -> str:
        return self._to

    # ------------------------------------------------------------------
    # Message builders
    # ------------------------------------------------------------------

    def build_admin_message(self, submission: "ContactSubmission") -> EmailMessage:
        s = submission
        msg = EmailMessage()
        msg["From"] = self._user
        msg["To"] = self._to
        msg["Reply-To"] = s.email
        msg["Subject"] = f"Nuevo contacto desde el sitio web - {s.company}"

        phone = s.phone or "No proporcionado"
        msg.set_content(
            f"Nuevo mensaje de contacto\n\n"
            f"Nombre: {s.name}\n"
            f"Empresa: {s.company}\n"
            f"Email: {s.email}\n"
            f"Teléfono: {phone}\n"
            f"Fecha: {s.timestamp.isoformat()}\n\n"
            f"Mensaje:\n{s.message}\n"
        )

        rows = [
            ("Nombre", s.name),
            ("Empresa", s.company),
            ("Email", s.email),
            ("Teléfono", phone),
            ("Fecha", s.timestamp.strftime("%d/%m/%Y %H:%M UTC")),
        ]
        rows_html = "".join(
            f'<div class="info-row"><span class="label">{label}:</span> {html.escape(value)}</div>'
            for label, value in rows
        )
        message_html = html.escape(s.message).replace("\n", "<br>")
        msg.add_alternative(_html_page(
            '<div class="header"><h1>Nuevo mensaje de contacto</h1></div>'
            f'<div class="content">{rows_html}'
            '<div><h3 style="margin-top: 0; color: #002156;">Mensaje:</h3>'
            f"<p>{message_html}</p></div></div>"
            '<div class="footer"><p>Este mensaje fue enviado desde el formulario de contacto de<br>'
            f"<strong>{html.escape(SITE_NAME)}</strong></p></div>"
        ), subtype="html")
        return msg

    def build_user_message(self, submission: "ContactSubmission") -> EmailMessage:
        s = submission
        msg = EmailMessage()
        msg["From"] = self._user
        msg["To"] = s.email
        msg["Subject"] = f"Hemos recibido tu mensaje - {SITE_NAME}"

        msg.set_content(
            f"Hola {s.name},\n\n"
            "Hemos recibido tu mensaje y nos pondremos en contacto contigo "
            "lo antes posible.\n\n"
            f"Saludos cordiales,\nEl equipo de {SITE_NAME}\n"
        )
        msg.add_alternative(_html_page(
            '<div class="header"><h1>¡Gracias por contactarnos!</h1></div>'
            '<div class="content">'
            f"<p>Hola <strong>{html.escape(s.name)}</strong>,</p>"
            "<p>Hemos recibido tu mensaje y nos pondremos en contacto contigo lo antes posible.</p>"
            f'<p>En <strong class="highlight">{html.escape(SITE_NAME)}</strong>, estamos '
            "comprometidos con impulsar el crecimiento de tu empresa en mercados "
            "nacionales e internacionales.</p>"
            "<p>Saludos cordiales,<br>"
            f"<strong>El equipo de {html.escape(SITE_NAME)}</strong></p>"
            "</div>"
        ), subtype="html")
        return msg

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def send_contact_emails(self, submission: "ContactSubmission") -> None:
        """Send the admin notification, then the user acknowledgment.

        Either failure fails the whole operation with DeliveryError.
        """
        if not self.configured:
            logger.error("Email credentials not configured; cannot deliver contact form")
            raise DeliveryError(_DELIVERY_FAILED)

        messages = [
            self.build_admin_message(submission),
            self.build_user_message(submission),
        ]
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._send_sync, messages),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error("SMTP send timed out after %.1fs", self._timeout)
            raise DeliveryError(_DELIVERY_FAILED)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send failed: %s", e, exc_info=True)
            raise DeliveryError(_DELIVERY_FAILED) from e

        logger.info("Contact emails sent for %s (%s)", submission.name, submission.email)

    async def verify_connection(self) -> bool:
        """Connect and authenticate without sending. Logs the outcome."""
        if not self.configured:
            logger.warning("Email not configured; skipping SMTP verification")
            return False
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._send_sync, []),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, smtplib.SMTPException, OSError) as e:
            logger.error("SMTP verification failed: %s", e)
            return False
        logger.info("SMTP connection verified (%s:%d)", self._host, self._port)
        return True

    def _send_sync(self, messages: list[EmailMessage]) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            server.starttls()
            server.login(self._user, self._password)
            for msg in messages:
                server.send_message(msg)
