#  Latam Site - Contact API Integration Tests
#
#  Contact submissions through the full stack, with SMTP mocked.
#
#  Depends on: latam_site/app.py, tests/conftest.py
#  Used by:    pytest

import smtplib

import pytest

FORM = {
    "nombre": "Ana Pérez",
    "empresa": "Exportadora Andina",
    "email": "ana@andina.example",
    "telefono": "+51 999 888 777",
    "mensaje": "Queremos cotizar un servicio de comercio exterior.",
}


@pytest.fixture
def post_contact(app_client, get_csrf):
    async def _post(payload):
        token = await get_csrf()
        return await app_client.post("/api/contact", json=payload, headers={"X-CSRF-Token": token})
    return _post


class TestContactSubmission:
    async def test_success_sends_both_emails(self, post_contact, smtp_mock):
        resp = await post_contact(FORM)
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "message": "Mensaje enviado correctamente. Nos pondremos en contacto pronto.",
        }
        assert smtp_mock.send_message.call_count == 2
        admin, user = (c.args[0] for c in smtp_mock.send_message.call_args_list)
        assert admin["To"] == "admin@latam.test"
        assert admin["Reply-To"] == "ana@andina.example"
        assert user["To"] == "ana@andina.example"

    async def test_missing_message_is_400(self, post_contact, smtp_mock):
        payload = {k: v for k, v in FORM.items() if k != "mensaje"}
        resp = await post_contact(payload)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Todos los campos obligatorios deben ser completados"}
        smtp_mock.send_message.assert_not_called()

    async def test_blank_fields_count_as_missing(self, post_contact, smtp_mock):
        resp = await post_contact({**FORM, "nombre": "   "})
        assert resp.status_code == 400
        smtp_mock.send_message.assert_not_called()

    async def test_invalid_email_is_400(self, post_contact, smtp_mock):
        resp = await post_contact({**FORM, "email": "ana-at-andina"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "El email proporcionado no es válido"}

    async def test_overlong_field_is_400(self, post_contact, smtp_mock):
        resp = await post_contact({**FORM, "nombre": "x" * 101})
        assert resp.status_code == 400
        assert "nombre" in resp.json()["error"]

    async def test_line_break_in_company_is_400(self, post_contact, smtp_mock):
        resp = await post_contact({**FORM, "empresa": "Acme\r\nBcc: spam@evil.example"})
        assert resp.status_code == 400
        assert "empresa" in resp.json()["error"]
        smtp_mock.send_message.assert_not_called()

    async def test_injection_keys_stripped(self, post_contact, smtp_mock):
        resp = await post_contact({**FORM, "$where": "1 == 1"})
        assert resp.status_code == 200

    async def test_smtp_failure_is_500(self, post_contact, smtp_mock):
        smtp_mock.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        resp = await post_contact(FORM)
        assert resp.status_code == 500
        assert "error" in resp.json()
        assert "535" not in resp.json()["error"]

    async def test_unconfigured_email_is_500(self, app_client, get_csrf):
        from dependency_injector import providers

        from latam_site.app import container
        from latam_site.services.email import EmailService

        container.email.override(providers.Object(EmailService(user="", password="")))
        try:
            token = await get_csrf()
            resp = await app_client.post("/api/contact", json=FORM, headers={"X-CSRF-Token": token})
        finally:
            container.email.reset_last_overriding()
        assert resp.status_code == 500
