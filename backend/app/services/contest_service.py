"""
Contest Service - Project of the Week workflow.

Weekly cycle (contest-local time):
    Saturday        registration   owners enter their projects
    Sunday          evaluation     admin runs the AI pick and approves a winner
    Monday-Friday   display        the winner is shown on the feed

An admin may pin the phase for the current week (ContestWeek.phase_override),
which every window check honours.

Approval writes the new winner, contestant outcomes, the win counter and the
announcement fan-out in one transaction, and refuses to approve the current
winner again. Replacing a winner moves the week's single pow_wins point to
the new owner; re-approving a project that won earlier in the same week
reinstates its row without a second announcement.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ContestClock, get_contest_clock
from app.core.config import settings
from app.core.exceptions import (
    AlreadyApprovedError,
    AlreadyRegisteredError,
    ContestantNotFoundError,
    ContestWindowClosedError,
    NotOwnerError,
    ProjectNotFoundError,
    ValidationError,
)
from app.core.logging_config import logger
from app.core.types import is_valid_uuid
from app.models.contest import (
    Contestant,
    ContestantStatus,
    ContestCertificateType,
    ContestPhase,
    ContestWeek,
    ProjectOfTheWeek,
)
from app.models.notification import NotificationType
from app.models.project import Project
from app.models.user import User
from app.services import contest_calendar as calendar
from app.services.contest_calendar import ContestWeekKey
from app.services.notification_service import NotificationService
from app.services.scoring_service import ScoreInput, ScoredContestant, build_reason, pick_winner

REGISTRATION_CLOSED_MESSAGE = "Contest registration is only allowed on Saturdays (12:00 AM - 11:59 PM)"
EVALUATION_CLOSED_MESSAGE = "AI evaluation is only available on Sundays"

WINNER_MESSAGE = '🎉 Congratulations! Your project "{title}" has been selected as Project of the Week!'
ANNOUNCEMENT_MESSAGE = '🏆 Project of the Week has been revealed! Check out "{title}" by {owner}'
REMINDER_MESSAGE = (
    "🏆 Reminder: Project of the Week contest registration opens tomorrow (Saturday)! "
    "Get your project ready."
)


@dataclass
class PhaseState:
    """Where the contest stands right now"""
    week: ContestWeekKey
    phase: ContestPhase
    derived: ContestPhase
    override: Optional[ContestPhase]


@dataclass
class AiPick:
    winner: ScoredContestant
    contestant: Contestant
    ranked: List[ScoredContestant]
    reason: str
    week: ContestWeekKey


@dataclass
class CurrentWinner:
    potw: Optional[ProjectOfTheWeek]
    active: bool


class ContestService:
    """Project of the Week operations over one request's session"""

    def __init__(self, db: AsyncSession, clock: Optional[ContestClock] = None):
        self.db = db
        self.clock = clock or get_contest_clock()
        self.notifications = NotificationService(db)

    # ========== Calendar ==========

    def now(self):
        return self.clock.now()

    def current_week(self) -> ContestWeekKey:
        return calendar.get_week(self.now())

    async def _get_contest_week(self, week: ContestWeekKey) -> Optional[ContestWeek]:
        result = await self.db.execute(
            select(ContestWeek).where(
                ContestWeek.week_number == week.week_number,
                ContestWeek.year == week.year,
            )
        )
        return result.scalar_one_or_none()

    async def _get_or_create_contest_week(self, week: ContestWeekKey) -> ContestWeek:
        contest_week = await self._get_contest_week(week)
        if contest_week is None:
            contest_week = ContestWeek(week_number=week.week_number, year=week.year)
            self.db.add(contest_week)
            await self.db.flush()
        return contest_week

    async def phase_state(self) -> PhaseState:
        now = self.now()
        week = calendar.get_week(now)
        contest_week = await self._get_contest_week(week)
        override = contest_week.phase_override if contest_week else None
        return PhaseState(
            week=week,
            phase=calendar.effective_phase(now, override),
            derived=calendar.derived_phase(now),
            override=override,
        )

    async def _require_phase(self, required: ContestPhase, message: str, flag: str) -> PhaseState:
        state = await self.phase_state()
        if state.phase != required:
            raise ContestWindowClosedError(
                message,
                required_phase=required.value,
                current_phase=state.phase.value,
                flag=flag,
            )
        return state

    async def set_phase(self, phase: Optional[ContestPhase], admin: User) -> PhaseState:
        """Pin (or with None, release) the phase for the current week"""
        week = self.current_week()
        contest_week = await self._get_or_create_contest_week(week)
        contest_week.phase_override = phase
        contest_week.updated_by_id = admin.id
        await self.db.commit()

        logger.log_contest_event(
            "phase_override", week.week_number, week.year,
            phase=phase.value if phase else None, admin_id=str(admin.id),
        )
        return await self.phase_state()

    # ========== Registration ==========

    async def _get_project(self, project_id: str) -> Project:
        project = await self.db.get(Project, project_id) if is_valid_uuid(project_id) else None
        if not project:
            raise ProjectNotFoundError(project_id)
        return project

    async def _find_contestant(self, project_id: str, week: ContestWeekKey) -> Optional[Contestant]:
        result = await self.db.execute(
            select(Contestant).where(
                Contestant.project_id == project_id,
                Contestant.week_number == week.week_number,
                Contestant.year == week.year,
            )
        )
        return result.scalar_one_or_none()

    async def register(self, project_id: str, user: User) -> Contestant:
        state = await self._require_phase(
            ContestPhase.REGISTRATION, REGISTRATION_CLOSED_MESSAGE, "canRegister"
        )
        project = await self._get_project(project_id)
        if project.owner_id != user.id:
            raise NotOwnerError("Only the project owner can register for contest")

        week = state.week
        now = self.now()
        contestant = await self._find_contestant(project.id, week)

        if contestant is not None and contestant.status != ContestantStatus.REMOVED:
            raise AlreadyRegisteredError(week.week_number, week.year)

        if contestant is not None:
            # Re-entering after an admin removal reuses the week's row
            contestant.status = ContestantStatus.ACTIVE
            contestant.certificate_type = ContestCertificateType.NONE
            contestant.registered_at = now
        else:
            contestant = Contestant(
                user_id=user.id,
                project_id=project.id,
                registered_at=now,
                week_number=week.week_number,
                year=week.year,
            )
            self.db.add(contestant)

        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same project
            await self.db.rollback()
            raise AlreadyRegisteredError(week.week_number, week.year)

        logger.log_contest_event(
            "registered", week.week_number, week.year,
            project_id=str(project.id), user_id=str(user.id),
        )
        return contestant

    async def check_registration(self, project_id: str) -> Tuple[Optional[Contestant], PhaseState]:
        state = await self.phase_state()
        contestant = None
        if is_valid_uuid(project_id):
            contestant = await self._find_contestant(project_id, state.week)
            if contestant is not None and contestant.status == ContestantStatus.REMOVED:
                contestant = None
        return contestant, state

    async def list_contestants(self, week: Optional[ContestWeekKey] = None) -> List[Contestant]:
        week = week or self.current_week()
        result = await self.db.execute(
            select(Contestant)
            .where(
                Contestant.week_number == week.week_number,
                Contestant.year == week.year,
                Contestant.status == ContestantStatus.ACTIVE,
            )
            .order_by(Contestant.registered_at.desc())
        )
        return list(result.scalars().all())

    async def count_contestants(self, week: ContestWeekKey) -> int:
        count = await self.db.scalar(
            select(func.count(Contestant.id)).where(
                Contestant.week_number == week.week_number,
                Contestant.year == week.year,
                Contestant.status == ContestantStatus.ACTIVE,
            )
        )
        return count or 0

    async def remove_contestant(self, contestant_id: str) -> Contestant:
        contestant = await self.db.get(Contestant, contestant_id) if is_valid_uuid(contestant_id) else None
        if not contestant:
            raise ContestantNotFoundError(contestant_id)
        contestant.status = ContestantStatus.REMOVED
        await self.db.commit()

        logger.log_contest_event(
            "contestant_removed", contestant.week_number, contestant.year,
            contestant_id=str(contestant.id),
        )
        return contestant

    # ========== Evaluation ==========

    async def ai_pick(self) -> AiPick:
        """Score this week's contestants and suggest a winner (nothing is saved)"""
        state = await self._require_phase(
            ContestPhase.EVALUATION, EVALUATION_CLOSED_MESSAGE, "canEvaluate"
        )
        contestants = await self.list_contestants(state.week)
        # list_contestants is newest first; score in registration order so
        # the earliest entrant wins a tie
        contestants = list(reversed(contestants))
        entries = [
            ScoreInput(
                project_id=str(c.project.id),
                contestant_id=str(c.id),
                user_id=str(c.user_id),
                title=c.project.title,
                description=c.project.description or "",
                tech_stack=list(c.project.tech_stack or []),
                likes_count=c.project.likes_count,
                comments_count=c.project.comments_count,
                registered_at=c.registered_at,
            )
            for c in contestants
        ]
        winner, ranked = pick_winner(entries, self.now(), state.week.week_number, state.week.year)
        by_id = {str(c.id): c for c in contestants}

        logger.log_contest_event(
            "ai_pick", state.week.week_number, state.week.year,
            project_id=winner.entry.project_id, score=winner.score, contestants=len(ranked),
        )
        return AiPick(
            winner=winner,
            contestant=by_id[winner.entry.contestant_id],
            ranked=ranked,
            reason=build_reason(winner),
            week=state.week,
        )

    async def approve(
        self,
        project_id: Optional[str],
        reason: Optional[str],
        admin: User,
        score: Optional[float] = None,
    ) -> ProjectOfTheWeek:
        if not project_id or not reason or not reason.strip():
            raise ValidationError("Project ID and reason are required")

        state = await self._require_phase(
            ContestPhase.EVALUATION, EVALUATION_CLOSED_MESSAGE, "canEvaluate"
        )
        project = await self._get_project(project_id)
        owner = project.owner
        week = state.week
        now = self.now()

        try:
            contest_week = await self._get_or_create_contest_week(week)
            replaced_project_id = contest_week.winner_project_id
            if replaced_project_id == project.id:
                raise AlreadyApprovedError(project.id, week.week_number, week.year)

            # A project approved earlier this week and since replaced gets its row back
            previous = await self._find_week_winner(project.id, week)
            replaced = (
                await self._find_week_winner(replaced_project_id, week)
                if replaced_project_id else None
            )

            await self.db.execute(
                update(ProjectOfTheWeek)
                .where(ProjectOfTheWeek.is_active == True)  # noqa: E712
                .values(is_active=False)
            )
            potw = previous or ProjectOfTheWeek(
                project_id=project.id,
                user_id=owner.id,
                week_number=week.week_number,
                year=week.year,
            )
            potw.reason = reason.strip()
            potw.score = score if score is not None else settings.POTW_DEFAULT_SCORE
            potw.selected_at = now
            potw.expires_at = calendar.next_sunday_midnight(now)
            potw.is_active = True
            if previous is None:
                self.db.add(potw)
            await self.db.flush()

            week_filter = (Contestant.week_number == week.week_number, Contestant.year == week.year)
            await self.db.execute(
                update(Contestant)
                .where(
                    *week_filter,
                    Contestant.project_id == project.id,
                    Contestant.status != ContestantStatus.REMOVED,
                )
                .values(status=ContestantStatus.WINNER, certificate_type=ContestCertificateType.WINNER)
            )
            # A replaced winner from earlier in the week becomes a participant
            await self.db.execute(
                update(Contestant)
                .where(
                    *week_filter,
                    Contestant.project_id != project.id,
                    Contestant.status.in_([ContestantStatus.ACTIVE, ContestantStatus.WINNER]),
                )
                .values(
                    status=ContestantStatus.PARTICIPANT,
                    certificate_type=ContestCertificateType.PARTICIPANT,
                )
            )

            # pow_wins counts the weeks a user currently holds, one per week
            if replaced is not None:
                await self.db.execute(
                    update(User)
                    .where(User.id == replaced.user_id, User.pow_wins > 0)
                    .values(pow_wins=User.pow_wins - 1)
                )
            await self.db.execute(
                update(User).where(User.id == owner.id).values(pow_wins=User.pow_wins + 1)
            )
            contest_week.winner_project_id = project.id

            announced = 0
            if previous is None:
                self.notifications.notify(
                    owner.id,
                    NotificationType.POTW_WINNER,
                    WINNER_MESSAGE.format(title=project.title),
                    related_project_id=project.id,
                    metadata={"weekNumber": week.week_number, "year": week.year},
                )
                other_ids = (
                    await self.db.execute(select(User.id).where(User.id != owner.id))
                ).scalars().all()
                announced = await self.notifications.notify_many(
                    other_ids,
                    NotificationType.POTW_ANNOUNCEMENT,
                    ANNOUNCEMENT_MESSAGE.format(title=project.title, owner=owner.name),
                    related_project_id=project.id,
                    metadata={"weekNumber": week.week_number, "year": week.year},
                )

            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent approval or phase change for this week
            await self.db.rollback()
            raise AlreadyApprovedError(project.id, week.week_number, week.year)
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(potw, ["project", "user"])
        logger.log_contest_event(
            "winner_approved", week.week_number, week.year,
            project_id=str(project.id), admin_id=str(admin.id),
            announced=announced, reinstated=previous is not None,
        )
        return potw

    async def _find_week_winner(self, project_id: str, week: ContestWeekKey) -> Optional[ProjectOfTheWeek]:
        result = await self.db.execute(
            select(ProjectOfTheWeek)
            .where(
                ProjectOfTheWeek.project_id == project_id,
                ProjectOfTheWeek.week_number == week.week_number,
                ProjectOfTheWeek.year == week.year,
            )
            .order_by(ProjectOfTheWeek.selected_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    # ========== Display ==========

    async def current_project_of_week(self) -> CurrentWinner:
        """Active winner; an expired one is switched off on read"""
        result = await self.db.execute(
            select(ProjectOfTheWeek)
            .where(ProjectOfTheWeek.is_active == True)  # noqa: E712
            .order_by(ProjectOfTheWeek.selected_at.desc())
            .limit(1)
        )
        potw = result.scalar_one_or_none()
        if potw is None:
            return CurrentWinner(potw=None, active=False)

        if self.now() > potw.expires_at:
            potw.is_active = False
            await self.db.commit()
            logger.log_contest_event("winner_expired", potw.week_number, potw.year, potw_id=str(potw.id))
            return CurrentWinner(potw=potw, active=False)

        return CurrentWinner(potw=potw, active=True)

    async def history(self, limit: Optional[int] = None) -> List[ProjectOfTheWeek]:
        result = await self.db.execute(
            select(ProjectOfTheWeek)
            .order_by(ProjectOfTheWeek.selected_at.desc())
            .limit(limit or settings.POTW_HISTORY_LIMIT)
        )
        return list(result.scalars().all())

    async def send_reminders(self) -> int:
        result = await self.db.execute(
            select(User.id).where(User.is_suspended == False)  # noqa: E712
        )
        sent = await self.notifications.notify_many(
            result.scalars().all(), NotificationType.CONTEST_REMINDER, REMINDER_MESSAGE
        )
        await self.db.commit()

        week = self.current_week()
        logger.log_contest_event("reminders_sent", week.week_number, week.year, sent=sent)
        return sent

    async def certificate_eligibility(self, project_id: str, user: User) -> Optional[Contestant]:
        """Latest contest outcome of the caller for this project that earns a certificate"""
        if not is_valid_uuid(project_id):
            return None
        result = await self.db.execute(
            select(Contestant)
            .where(
                Contestant.project_id == project_id,
                Contestant.user_id == user.id,
                Contestant.certificate_type.in_(
                    [ContestCertificateType.WINNER, ContestCertificateType.PARTICIPANT]
                ),
            )
            .order_by(Contestant.registered_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
