#  Latam Site - Contact Route
#
#  Contact-form submission. Gated by the general limiter and CSRF at router
#  level, plus the contact limiter on this route only.
#
#  Depends on: container.py, services/contact.py, middleware/gate.py
#  Used by:    app.py

from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends

from latam_site.container import Container
from latam_site.middleware.gate import contact_rate_limit
from latam_site.models.schemas import ContactOut, ContactRequest
from latam_site.services.contact import ContactService, ContactSubmission

router = APIRouter(tags=["contact"])


@router.post("/contact", dependencies=[Depends(contact_rate_limit)])
@inject
async def submit_contact(
    body: ContactRequest,
    contact: ContactService = Depends(Provide[Container.contact]),
) -> ContactOut:
    """Validate the form and send the admin + acknowledgment emails."""
    submission = ContactSubmission.from_form(
        nombre=body.nombre,
        empresa=body.empresa,
        email=body.email,
        telefono=body.telefono,
        mensaje=body.mensaje,
    )
    await contact.handle(submission)
    return ContactOut(
        success=True,
        message="Mensaje enviado correctamente. Nos pondremos en contacto pronto.",
    )
