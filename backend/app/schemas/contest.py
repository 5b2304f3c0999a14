from pydantic import Field
from typing import Optional

from app.models.contest import Contestant, ContestPhase, ProjectOfTheWeek
from app.schemas.auth import serialize_user_brief
from app.schemas.common import CamelModel, iso
from app.schemas.project import serialize_project_card


class ApproveRequest(CamelModel):
    # Checked by the service so a missing field answers 400 like other contest errors
    project_id: Optional[str] = None
    reason: Optional[str] = None
    score: Optional[float] = Field(None, ge=0)


class PhaseUpdate(CamelModel):
    """None clears the override and hands control back to the calendar"""
    phase: Optional[ContestPhase] = None


def serialize_contestant(contestant: Contestant) -> dict:
    return {
        "id": contestant.id,
        "project": serialize_project_card(contestant.project),
        "user": serialize_user_brief(contestant.user),
        "registeredAt": iso(contestant.registered_at),
        "weekNumber": contestant.week_number,
        "year": contestant.year,
        "status": contestant.status.value,
        "certificateType": contestant.certificate_type.value,
    }


def serialize_winner(potw: ProjectOfTheWeek) -> dict:
    return {
        "id": potw.id,
        "project": serialize_project_card(potw.project),
        "reason": potw.reason,
        "score": potw.score,
        "weekNumber": potw.week_number,
        "year": potw.year,
        "selectedAt": iso(potw.selected_at),
        "expiresAt": iso(potw.expires_at),
        "isActive": potw.is_active,
    }


def serialize_history_entry(potw: ProjectOfTheWeek) -> dict:
    data = serialize_winner(potw)
    data["owner"] = {
        "id": potw.user.id,
        "name": potw.user.name,
        "avatarUrl": potw.user.avatar_url,
        "powWins": potw.user.pow_wins,
    }
    return data
