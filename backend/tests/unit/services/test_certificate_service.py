"""
Unit Tests for certificate ids and PDF rendering
"""
import re

import pytest

from app.models.certificate import CertificateKind
from app.services.certificate_service import (
    CertificateContent,
    CertificateRenderer,
    generate_certificate_id,
    write_certificate_file,
)


class TestCertificateId:

    def test_completion_format(self):
        certificate_id = generate_certificate_id(CertificateKind.COMPLETION)
        assert re.fullmatch(r"NIAT-\d{13}-[A-Z0-9]{9}", certificate_id)

    def test_winner_format(self):
        certificate_id = generate_certificate_id(CertificateKind.WINNER, 24, 2024)
        assert re.fullmatch(r"NIAT-POTW-WINNER-W24-2024-[A-Z0-9]{9}", certificate_id)

    def test_participant_format(self):
        certificate_id = generate_certificate_id(CertificateKind.PARTICIPANT, 3, 2025)
        assert certificate_id.startswith("NIAT-POTW-PARTICIPANT-W3-2025-")

    def test_ids_are_unique(self):
        ids = {generate_certificate_id(CertificateKind.WINNER, 24, 2024) for _ in range(50)}
        assert len(ids) == 50


class TestRenderer:

    @pytest.mark.parametrize("kind", list(CertificateKind))
    def test_renders_pdf_bytes(self, kind):
        content = CertificateContent(
            kind=kind,
            recipient_name="Asha Rao",
            project_title="Campus <Navigator> & Friends",
            tech_stack=["React", "Node", "MongoDB"],
            certificate_id="NIAT-TEST-0001",
            issue_date="June 16, 2024",
            week_number=24 if kind != CertificateKind.COMPLETION else None,
            year=2024 if kind != CertificateKind.COMPLETION else None,
        )

        pdf = CertificateRenderer().render(content)

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_write_creates_directories(self, tmp_path):
        path = tmp_path / "uploads" / "certificates" / "NIAT-1.pdf"

        write_certificate_file(path, b"%PDF-1.4 test")

        assert path.read_bytes() == b"%PDF-1.4 test"
