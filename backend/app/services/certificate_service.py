"""
Certificate Service - project completion and Project of the Week certificates.

Certificates are rendered once to a PDF under CERTIFICATES_DIR and recorded
in the certificates table; the stored URL is what the client downloads.
Issuing is idempotent per (user, project, certificate type), and for contest
certificates per contest week too: asking again returns the existing
certificate.
"""

import io
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.core.clock import ContestClock, get_contest_clock
from app.core.config import settings
from app.core.exceptions import (
    CertificateFileMissingError,
    CertificateNotEligibleError,
    CertificateNotFoundError,
    NotOwnerError,
    ProjectNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.types import is_valid_uuid
from app.models.certificate import Certificate, CertificateKind
from app.models.contest import Contestant, ContestCertificateType
from app.models.project import Project
from app.models.user import User

RANDOM_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
RANDOM_SUFFIX_LENGTH = 9
MAX_TECHNOLOGIES = 6

# Served from UPLOADS_DIR by the /uploads static mount
CERTIFICATE_URL_PREFIX = "/uploads/certificates"


def _random_suffix() -> str:
    return "".join(secrets.choice(RANDOM_SUFFIX_ALPHABET) for _ in range(RANDOM_SUFFIX_LENGTH))


def generate_certificate_id(
    kind: CertificateKind,
    week_number: Optional[int] = None,
    year: Optional[int] = None,
) -> str:
    """
    Public certificate id.

    completion: NIAT-1718000000000-K3J9QX2ZA
    contest:    NIAT-POTW-WINNER-W24-2024-K3J9QX2ZA
    """
    prefix = settings.CERTIFICATE_ID_PREFIX
    if kind == CertificateKind.COMPLETION:
        return f"{prefix}-{int(time.time() * 1000)}-{_random_suffix()}"
    return f"{prefix}-POTW-{kind.value.upper()}-W{week_number}-{year}-{_random_suffix()}"


def write_certificate_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


@dataclass
class CertificateContent:
    """Everything printed on a certificate"""
    kind: CertificateKind
    recipient_name: str
    project_title: str
    tech_stack: Sequence[str]
    certificate_id: str
    issue_date: str
    week_number: Optional[int] = None
    year: Optional[int] = None


@dataclass
class _Theme:
    borders: Tuple[str, ...]
    accent: str
    heading: Tuple[str, ...]
    statement: str
    corner_ornaments: bool = False
    closing_line: Optional[str] = None


THEMES = {
    CertificateKind.COMPLETION: _Theme(
        borders=("#2563eb", "#93c5fd"),
        accent="#2563eb",
        heading=("CERTIFICATE", "OF ACHIEVEMENT"),
        statement="has successfully completed the project",
    ),
    CertificateKind.WINNER: _Theme(
        borders=("#d97706", "#fbbf24", "#fcd34d"),
        accent="#d97706",
        heading=("PROJECT OF THE WEEK", "CERTIFICATE", "WINNER"),
        statement="has been awarded the prestigious Project of the Week honor for the exceptional project",
        corner_ornaments=True,
        closing_line=(
            "Selected through AI-powered evaluation for outstanding innovation, "
            "quality, and community impact"
        ),
    ),
    CertificateKind.PARTICIPANT: _Theme(
        borders=("#3b82f6", "#60a5fa"),
        accent="#3b82f6",
        heading=("PROJECT OF THE WEEK", "Certificate of Participation"),
        statement="has successfully participated in the Project of the Week contest with the project",
    ),
}


class CertificateRenderer:
    """Lay out a landscape A4 certificate with reportlab"""

    def render(self, content: CertificateContent) -> bytes:
        theme = THEMES[content.kind]
        buffer = io.BytesIO()

        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            rightMargin=2.5*cm,
            leftMargin=2.5*cm,
            topMargin=2*cm,
            bottomMargin=1.8*cm,
            title=f"Certificate {content.certificate_id}",
        )

        styles = getSampleStyleSheet()
        accent = colors.HexColor(theme.accent)

        heading_style = ParagraphStyle(
            'CertHeading',
            parent=styles['Heading1'],
            fontSize=30,
            leading=36,
            textColor=accent,
            alignment=TA_CENTER,
            spaceAfter=2
        )

        subheading_style = ParagraphStyle(
            'CertSubheading',
            parent=styles['Heading2'],
            fontSize=18,
            textColor=colors.HexColor('#4b5563'),
            alignment=TA_CENTER,
            spaceAfter=4
        )

        name_style = ParagraphStyle(
            'RecipientName',
            parent=styles['Heading1'],
            fontSize=26,
            leading=32,
            textColor=colors.HexColor('#111827'),
            alignment=TA_CENTER,
            spaceBefore=6,
            spaceAfter=6
        )

        project_style = ParagraphStyle(
            'ProjectTitle',
            parent=styles['Heading2'],
            fontSize=18,
            textColor=accent,
            alignment=TA_CENTER,
            spaceBefore=6,
            spaceAfter=10
        )

        body_style = ParagraphStyle(
            'CertBody',
            parent=styles['Normal'],
            fontSize=12,
            textColor=colors.HexColor('#374151'),
            alignment=TA_CENTER,
            spaceAfter=6
        )

        small_style = ParagraphStyle(
            'CertSmall',
            parent=styles['Normal'],
            fontSize=9,
            textColor=colors.HexColor('#6b7280'),
            alignment=TA_CENTER,
            spaceAfter=4
        )

        story = []
        story.append(Paragraph(theme.heading[0], heading_style))
        for line in theme.heading[1:]:
            story.append(Paragraph(line, subheading_style))
        if content.kind == CertificateKind.COMPLETION:
            story.append(Paragraph(settings.CERTIFICATE_ISSUER, body_style))
        else:
            story.append(Paragraph(f"Week {content.week_number} • {content.year}", body_style))
        story.append(Spacer(1, 14))

        story.append(Paragraph("This is to certify that", body_style))
        story.append(Paragraph(f"<b>{escape(content.recipient_name)}</b>", name_style))
        story.append(Paragraph(theme.statement, body_style))
        story.append(Paragraph(f"<b>{escape(content.project_title)}</b>", project_style))

        if content.tech_stack:
            technologies = ", ".join(escape(t) for t in list(content.tech_stack)[:MAX_TECHNOLOGIES])
            story.append(Paragraph(f"<b>Technologies:</b> {technologies}", body_style))
        if theme.closing_line:
            story.append(Paragraph(f"<i>{theme.closing_line}</i>", body_style))
        story.append(Spacer(1, 16))

        date_label = "Date" if content.kind == CertificateKind.COMPLETION else "Issued on"
        story.append(Paragraph(f"{date_label}: {content.issue_date}", small_style))
        story.append(Paragraph(f"Certificate ID: <b>{content.certificate_id}</b>", small_style))

        footer = (
            settings.CERTIFICATE_FOOTER
            if content.kind == CertificateKind.COMPLETION
            else settings.CONTEST_CERTIFICATE_FOOTER
        )

        def decorate(canvas, document):
            self._draw_frame(canvas, document, theme, footer)

        doc.build(story, onFirstPage=decorate)

        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes

    @staticmethod
    def _draw_frame(canvas, document, theme: _Theme, footer: str) -> None:
        width, height = document.pagesize
        canvas.saveState()

        # Nested borders, outermost first
        inset = 0.6*cm
        for index, color in enumerate(theme.borders):
            canvas.setStrokeColor(colors.HexColor(color))
            canvas.setLineWidth(4 if index == 0 else 1.5)
            canvas.rect(inset, inset, width - 2*inset, height - 2*inset)
            inset += 0.3*cm

        if theme.corner_ornaments:
            size = 1.6*cm
            canvas.setFillColor(colors.HexColor(theme.borders[1]))
            for x, y, dx, dy in (
                (0, 0, 1, 1),
                (width, 0, -1, 1),
                (0, height, 1, -1),
                (width, height, -1, -1),
            ):
                path = canvas.beginPath()
                path.moveTo(x, y)
                path.lineTo(x + dx*size, y)
                path.lineTo(x, y + dy*size)
                path.close()
                canvas.drawPath(path, stroke=0, fill=1)

        canvas.setFont("Helvetica", 9)
        canvas.setFillColor(colors.HexColor('#6b7280'))
        canvas.drawCentredString(width / 2, 1.2*cm, footer)
        canvas.restoreState()


class CertificateService:
    """Issue, list and locate certificates"""

    def __init__(
        self,
        db: AsyncSession,
        clock: Optional[ContestClock] = None,
        renderer: Optional[CertificateRenderer] = None,
    ):
        self.db = db
        self.clock = clock or get_contest_clock()
        self.renderer = renderer or CertificateRenderer()

    # ========== Lookups ==========

    async def _owned_project(self, project_id: Optional[str], user: User) -> Project:
        if not project_id:
            raise ValidationError("Project ID is required", field="projectId")
        project = await self.db.get(Project, project_id) if is_valid_uuid(project_id) else None
        if not project:
            raise ProjectNotFoundError(project_id)
        if project.owner_id != user.id:
            raise NotOwnerError("Only project owner can generate certificate")
        return project

    async def _find(
        self,
        user_id: str,
        project_id: str,
        kind: CertificateKind,
        week_number: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Optional[Certificate]:
        query = select(Certificate).where(
            Certificate.user_id == user_id,
            Certificate.project_id == project_id,
            Certificate.certificate_type == kind,
        )
        if kind != CertificateKind.COMPLETION:
            # Contest certificates are per week
            query = query.where(Certificate.week_number == week_number, Certificate.year == year)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(self, user: User) -> List[Certificate]:
        result = await self.db.execute(
            select(Certificate)
            .where(Certificate.user_id == user.id)
            .order_by(Certificate.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_by_public_id(self, certificate_id: str) -> Certificate:
        result = await self.db.execute(
            select(Certificate).where(Certificate.certificate_id == certificate_id)
        )
        certificate = result.scalar_one_or_none()
        if not certificate:
            raise CertificateNotFoundError(certificate_id)
        return certificate

    def resolve_file(self, certificate: Certificate) -> Path:
        path = settings.CERTIFICATES_DIR / certificate.file_name
        if not path.is_file():
            logger.warning(f"[CertificateService] File missing for {certificate.certificate_id}: {path}")
            raise CertificateFileMissingError(certificate.certificate_id)
        return path

    async def check(self, project_id: str) -> Optional[Certificate]:
        """Any certificate issued for the project"""
        if not is_valid_uuid(project_id):
            return None
        result = await self.db.execute(
            select(Certificate)
            .where(Certificate.project_id == project_id)
            .order_by(Certificate.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    # ========== Issuing ==========

    async def issue_completion(self, project_id: Optional[str], user: User) -> Tuple[Certificate, bool]:
        """Returns (certificate, created)"""
        project = await self._owned_project(project_id, user)
        existing = await self._find(user.id, project.id, CertificateKind.COMPLETION)
        if existing:
            return existing, False
        return await self._issue(user, project, CertificateKind.COMPLETION)

    async def issue_contest(
        self,
        project_id: Optional[str],
        certificate_type: Optional[str],
        user: User,
    ) -> Tuple[Certificate, bool]:
        if not project_id or not certificate_type:
            raise ValidationError("Project ID and certificate type are required")
        try:
            kind = CertificateKind(certificate_type)
        except ValueError:
            raise ValidationError("Certificate type must be winner or participant", field="certificateType")
        if kind == CertificateKind.COMPLETION:
            raise ValidationError("Certificate type must be winner or participant", field="certificateType")

        project = await self._owned_project(project_id, user)

        # Week and year come from the contest record, never from the client
        result = await self.db.execute(
            select(Contestant)
            .where(
                Contestant.project_id == project.id,
                Contestant.user_id == user.id,
                Contestant.certificate_type == ContestCertificateType(kind.value),
            )
            .order_by(Contestant.registered_at.desc())
            .limit(1)
        )
        contestant = result.scalar_one_or_none()
        if not contestant:
            raise CertificateNotEligibleError(kind.value)

        existing = await self._find(user.id, project.id, kind, contestant.week_number, contestant.year)
        if existing:
            return existing, False
        return await self._issue(user, project, kind, contestant.week_number, contestant.year)

    async def _issue(
        self,
        user: User,
        project: Project,
        kind: CertificateKind,
        week_number: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Tuple[Certificate, bool]:
        certificate_id = generate_certificate_id(kind, week_number, year)
        file_name = f"{certificate_id}.pdf"
        path = settings.CERTIFICATES_DIR / file_name

        content = CertificateContent(
            kind=kind,
            recipient_name=user.name,
            project_title=project.title,
            tech_stack=list(project.tech_stack or []),
            certificate_id=certificate_id,
            issue_date=self.clock.now().strftime("%B %d, %Y"),
            week_number=week_number,
            year=year,
        )
        pdf_bytes = await run_in_threadpool(self.renderer.render, content)
        await run_in_threadpool(write_certificate_file, path, pdf_bytes)

        certificate = Certificate(
            user_id=user.id,
            project_id=project.id,
            project_title=project.title,
            certificate_type=kind,
            certificate_id=certificate_id,
            certificate_url=f"{CERTIFICATE_URL_PREFIX}/{file_name}",
            week_number=week_number,
            year=year,
        )
        self.db.add(certificate)
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent request issued the same certificate first
            await self.db.rollback()
            path.unlink(missing_ok=True)
            existing = await self._find(user.id, project.id, kind, week_number, year)
            if existing is None:
                raise
            return existing, False

        logger.info(
            f"[CertificateService] Issued {kind.value} certificate {certificate_id} "
            f"for project {project.id} to user {user.id}"
        )
        return certificate, True
