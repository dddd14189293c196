import pytest

from helpers import email
from helpers.email import medicine_lines, send_email, send_prescription_email, send_status_update_email


class TestMedicineLines:
    def test_pairs_by_position(self) -> None:
        assert medicine_lines(["A", "B"], ["once", "twice"]) == ["A - once", "B - twice"]

    def test_missing_dosage_defaults(self) -> None:
        assert medicine_lines(["A", "B"], ["once"]) == ["A - once", "B - As directed"]


class TestSendEmail:
    def test_missing_smtp_config_is_not_fatal(self, monkeypatch) -> None:
        for name in ("SMTP_FROM_USER", "SMTP_SERVER", "SMTP_PORT", "SMTP_FROM_ADDRESS", "SMTP_PASSWORD"):
            monkeypatch.delenv(name, raising=False)

        assert send_email("someone@example.com", "Hello", "<p>hi</p>") is False

    def test_non_numeric_port_is_not_fatal(self, monkeypatch) -> None:
        monkeypatch.setenv("SMTP_FROM_USER", "Clinic")
        monkeypatch.setenv("SMTP_SERVER", "smtp.example.com")
        monkeypatch.setenv("SMTP_PORT", "ssl")
        monkeypatch.setenv("SMTP_FROM_ADDRESS", "clinic@example.com")
        monkeypatch.setenv("SMTP_PASSWORD", "secret")

        def no_network(*args, **kwargs):
            raise AssertionError("SMTP connection attempted")

        monkeypatch.setattr(email.smtplib, "SMTP_SSL", no_network)

        assert send_email("someone@example.com", "Hello", "<p>hi</p>") is False


@pytest.fixture
def outbox(monkeypatch) -> list:
    sent = []

    def fake_send(to_address: str, subject: str, message_html: str) -> bool:
        sent.append((to_address, subject, message_html))
        return True

    monkeypatch.setattr(email, "send_email", fake_send)
    return sent


class TestTemplates:
    def test_status_update_mentions_slot(self, outbox: list) -> None:
        assert send_status_update_email("p@example.com", "Pat", "House", "2030-01-10", "10:00", "confirmed")

        to_address, subject, html = outbox[0]
        assert to_address == "p@example.com"
        assert subject == "Appointment Confirmed"
        assert "2030-01-10" in html and "10:00" in html

    def test_prescription_escapes_user_text(self, outbox: list) -> None:
        send_prescription_email(
            "p@example.com", "<Pat>", "House", None, "Flu", ["Paracetamol"], [], None, None
        )

        html = outbox[0][2]
        assert "&lt;Pat&gt;" in html
        assert "Paracetamol - As directed" in html
        assert "General Physician" in html
