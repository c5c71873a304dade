#  Latam Site - Contact Handler
#
#  Validates a contact-form submission and hands it to the email service.
#  Submissions are transient: nothing is persisted.
#
#  Depends on: services/email.py, exceptions.py
#  Used by:    container.py, routes/contact.py

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from latam_site.exceptions import ValidationError
from latam_site.services.email import EmailService

logger = logging.getLogger("latam_site.contact")

# Conservative: one @, no whitespace, a dot in the domain part
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# attribute -> (wire field name, max length)
MAX_LENGTHS = {
    "name": ("nombre", 100),
    "company": ("empresa", 200),
    "email": ("email", 254),
    "phone": ("telefono", 30),
    "message": ("mensaje", 5000),
}

# Fields that end up in mail headers (Subject, display names)
SINGLE_LINE_FIELDS = ("name", "company", "phone")


@dataclass
class ContactSubmission:
    name: str
    company: str
    email: str
    message: str
    phone: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_form(cls, nombre=None, empresa=None, email=None, telefono=None,
                  mensaje=None) -> "ContactSubmission":
        """Build from the Spanish wire field names, trimming whitespace."""
        return cls(
            name=(nombre or "").strip(),
            company=(empresa or "").strip(),
            email=(email or "").strip(),
            message=(mensaje or "").strip(),
            phone=(telefono or "").strip() or None,
        )


def validate_submission(submission: ContactSubmission) -> None:
    """Raise ValidationError unless the submission can be delivered."""
    required = (submission.name, submission.company, submission.email, submission.message)
    if not all(required):
        raise ValidationError("Todos los campos obligatorios deben ser completados")

    if not EMAIL_PATTERN.match(submission.email):
        raise ValidationError("El email proporcionado no es válido")

    for attr, (wire_name, limit) in MAX_LENGTHS.items():
        value = getattr(submission, attr)
        if value and len(value) > limit:
            raise ValidationError(f"El campo {wire_name} excede la longitud permitida")

    for attr in SINGLE_LINE_FIELDS:
        value = getattr(submission, attr)
        if value and ("\r" in value or "\n" in value):
            wire_name = MAX_LENGTHS[attr][0]
            raise ValidationError(f"El campo {wire_name} no puede contener saltos de línea")


class ContactService:
    """Validate, then deliver. Delivery failures propagate as DeliveryError."""

    def __init__(self, email: EmailService):
        self._email = email

    async def handle(self, submission: ContactSubmission) -> None:
        validate_submission(submission)
        await self._email.send_contact_emails(submission)
        logger.info("Contact submission accepted from %s", submission.company)
