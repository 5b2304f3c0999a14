from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Index, text
from sqlalchemy.orm import relationship
import enum

from app.core.clock import utcnow
from app.core.database import Base
from app.core.types import GUID, generate_uuid, value_enum


class CertificateKind(str, enum.Enum):
    COMPLETION = "completion"
    WINNER = "winner"
    PARTICIPANT = "participant"


class Certificate(Base):
    """
    Issued certificate and the location of its rendered PDF.

    project_id is nulled when the project is deleted; project_title keeps the
    name that was printed on the certificate.
    """
    __tablename__ = "certificates"

    __table_args__ = (
        # One completion certificate per project, one contest certificate per project and week
        Index(
            "uq_certificates_completion", "user_id", "project_id",
            unique=True,
            sqlite_where=text("certificate_type = 'completion'"),
            postgresql_where=text("certificate_type = 'completion'"),
        ),
        Index(
            "uq_certificates_contest_week", "user_id", "project_id", "certificate_type", "week_number", "year",
            unique=True,
            sqlite_where=text("certificate_type != 'completion'"),
            postgresql_where=text("certificate_type != 'completion'"),
        ),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)
    project_title = Column(String(255), nullable=False)

    certificate_type = Column(value_enum(CertificateKind), default=CertificateKind.COMPLETION, nullable=False)
    certificate_id = Column(String(100), unique=True, index=True, nullable=False)
    certificate_url = Column(String(500), nullable=False)

    # Contest certificates only
    week_number = Column(Integer, nullable=True)
    year = Column(Integer, nullable=True)

    issued_at = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    project = relationship("Project", lazy="selectin")

    @property
    def file_name(self) -> str:
        return self.certificate_url.rsplit("/", 1)[-1]

    def __repr__(self):
        return f"<Certificate {self.certificate_id}>"
