"""
Project of the Week contest API.

Registration is open on Saturday, evaluation (AI pick and approval) on
Sunday, and the winner is displayed Monday to Friday. An admin can pin the
phase for the current week with PUT /contest/phase.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ContestClock, get_contest_clock
from app.core.database import get_db
from app.models.contest import ContestPhase
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin, get_current_user
from app.schemas.contest import (
    ApproveRequest,
    PhaseUpdate,
    serialize_contestant,
    serialize_history_entry,
    serialize_winner,
)
from app.services.contest_service import ContestService, PhaseState

router = APIRouter()


def get_contest_service(
    db: AsyncSession = Depends(get_db),
    clock: ContestClock = Depends(get_contest_clock),
) -> ContestService:
    return ContestService(db, clock)


def _phase_payload(state: PhaseState) -> dict:
    return {
        "phase": state.phase.value,
        "derivedPhase": state.derived.value,
        "phaseOverride": state.override.value if state.override else None,
        "canRegister": state.phase == ContestPhase.REGISTRATION,
        "isEvaluationPeriod": state.phase == ContestPhase.EVALUATION,
        "isDisplayPeriod": state.phase == ContestPhase.DISPLAY,
        "weekNumber": state.week.week_number,
        "year": state.week.year,
    }


@router.post("/register/{project_id}", status_code=status.HTTP_201_CREATED)
async def register_for_contest(
    project_id: str,
    service: ContestService = Depends(get_contest_service),
    current_user: User = Depends(get_current_user)
):
    """Enter one of the caller's projects in this week's contest"""
    contestant = await service.register(project_id, current_user)
    return {
        "message": "Successfully registered for Project of the Week contest!",
        "contestant": {
            "id": contestant.id,
            "weekNumber": contestant.week_number,
            "year": contestant.year,
            "registeredAt": contestant.registered_at.isoformat(),
        },
    }


@router.get("/check-registration/{project_id}")
async def check_registration(
    project_id: str,
    service: ContestService = Depends(get_contest_service),
    current_user: User = Depends(get_current_user)
):
    contestant, state = await service.check_registration(project_id)
    return {
        "isRegistered": contestant is not None,
        **_phase_payload(state),
        "contestant": {
            "id": contestant.id,
            "registeredAt": contestant.registered_at.isoformat(),
            "status": contestant.status.value,
        } if contestant else None,
    }


@router.get("/contestants")
async def list_contestants(
    service: ContestService = Depends(get_contest_service),
    current_admin: User = Depends(get_current_admin)
):
    week = service.current_week()
    contestants = await service.list_contestants(week)
    return {
        "contestants": [serialize_contestant(c) for c in contestants],
        "weekNumber": week.week_number,
        "year": week.year,
        "count": len(contestants),
    }


@router.delete("/contestants/{contestant_id}")
async def remove_contestant(
    contestant_id: str,
    service: ContestService = Depends(get_contest_service),
    current_admin: User = Depends(get_current_admin)
):
    await service.remove_contestant(contestant_id)
    return {"message": "Contestant removed from contest"}


@router.post("/ai-pick")
async def ai_pick(
    service: ContestService = Depends(get_contest_service),
    current_admin: User = Depends(get_current_admin)
):
    """Score this week's contestants and suggest a winner (nothing is saved)"""
    pick = await service.ai_pick()
    entry = pick.winner.entry
    owner = pick.contestant.project.owner
    return {
        "success": True,
        "suggestion": {
            "contestantId": entry.contestant_id,
            "projectId": entry.project_id,
            "userId": entry.user_id,
            "ownerName": owner.name,
            "ownerAvatar": owner.avatar_url,
            "title": entry.title,
            "description": entry.description,
            "techStack": entry.tech_stack,
            "score": pick.winner.score,
            "breakdown": pick.winner.breakdown,
            "reason": pick.reason,
            "weekNumber": pick.week.week_number,
            "year": pick.week.year,
        },
        "totalContestants": len(pick.ranked),
        "allScores": [
            {"projectId": s.entry.project_id, "title": s.entry.title, "score": s.score}
            for s in pick.ranked
        ],
    }


@router.post("/approve")
async def approve_winner(
    body: ApproveRequest,
    service: ContestService = Depends(get_contest_service),
    current_admin: User = Depends(get_current_admin)
):
    """Publish the week's winner and notify everyone"""
    potw = await service.approve(body.project_id, body.reason, current_admin, score=body.score)
    return {
        "message": "Project of the Week approved successfully!",
        "potw": {
            "id": potw.id,
            "project": {
                "id": potw.project.id,
                "title": potw.project.title,
                "owner": potw.user.name,
            },
            "reason": potw.reason,
            "score": potw.score,
            "expiresAt": potw.expires_at.isoformat(),
            "weekNumber": potw.week_number,
            "year": potw.year,
        },
    }


@router.get("/status")
async def contest_status(
    service: ContestService = Depends(get_contest_service),
    current_user: User = Depends(get_current_user)
):
    """Banner data for the feed"""
    state = await service.phase_state()
    current = await service.current_project_of_week()
    contestants_count = await service.count_contestants(state.week)
    has_winner = current.active
    return {
        "hasWinner": has_winner,
        "contestInProgress": contestants_count > 0 and not has_winner,
        "contestantsCount": contestants_count,
        **_phase_payload(state),
        "winner": serialize_winner(current.potw) if has_winner else None,
    }


@router.get("/history")
async def contest_history(
    limit: int = Query(None, ge=1, le=100),
    service: ContestService = Depends(get_contest_service),
    current_user: User = Depends(get_current_user)
):
    """Past winners, newest first"""
    return [serialize_history_entry(potw) for potw in await service.history(limit)]


@router.post("/send-reminders")
async def send_reminders(
    service: ContestService = Depends(get_contest_service),
    current_admin: User = Depends(get_current_admin)
):
    sent = await service.send_reminders()
    return {"message": "Contest reminders sent successfully", "sent": sent}


@router.get("/certificate-eligibility/{project_id}")
async def certificate_eligibility(
    project_id: str,
    service: ContestService = Depends(get_contest_service),
    current_user: User = Depends(get_current_user)
):
    contestant = await service.certificate_eligibility(project_id, current_user)
    if contestant is None:
        return {"eligible": False, "certificateType": None}
    return {
        "eligible": True,
        "certificateType": contestant.certificate_type.value,
        "weekNumber": contestant.week_number,
        "year": contestant.year,
        "contestantId": contestant.id,
    }


@router.get("/phase")
async def get_phase(
    service: ContestService = Depends(get_contest_service),
    current_user: User = Depends(get_current_user)
):
    return _phase_payload(await service.phase_state())


@router.put("/phase")
async def set_phase(
    body: PhaseUpdate,
    service: ContestService = Depends(get_contest_service),
    current_admin: User = Depends(get_current_admin)
):
    """Pin the current week's phase, or clear the pin with {"phase": null}"""
    state = await service.set_phase(body.phase, current_admin)
    return _phase_payload(state)
