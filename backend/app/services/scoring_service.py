"""
Project of the Week scoring.

score = likes*3 + comments*5 + techStack*2 + descriptionBonus + recencyBonus

    descriptionBonus = 10 when the description is longer than 200 chars, else 5
    recencyBonus     = max(0, 7 - whole days since registration)

Pure functions: no database access, "now" is passed in.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from app.core.exceptions import NoContestantsError

LIKE_WEIGHT = 3
COMMENT_WEIGHT = 5
TECH_WEIGHT = 2
LONG_DESCRIPTION_CHARS = 200
LONG_DESCRIPTION_BONUS = 10
SHORT_DESCRIPTION_BONUS = 5
RECENCY_WINDOW_DAYS = 7

DEFAULT_REASON = "Outstanding project quality and presentation."


@dataclass
class ScoreInput:
    project_id: str
    contestant_id: str
    user_id: str
    title: str
    description: str
    tech_stack: List[str]
    likes_count: int
    comments_count: int
    registered_at: datetime


@dataclass
class ScoredContestant:
    entry: ScoreInput
    score: float
    breakdown: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "contestantId": self.entry.contestant_id,
            "projectId": self.entry.project_id,
            "title": self.entry.title,
            "score": self.score,
            "breakdown": self.breakdown,
        }


def _recency_bonus(registered_at: datetime, now: datetime) -> int:
    days = math.floor((now - registered_at).total_seconds() / 86400)
    return max(0, RECENCY_WINDOW_DAYS - days)


def score_contestant(entry: ScoreInput, now: datetime) -> ScoredContestant:
    tech_stack = entry.tech_stack or []
    breakdown = {
        "likes": entry.likes_count * LIKE_WEIGHT,
        "comments": entry.comments_count * COMMENT_WEIGHT,
        "techStack": len(tech_stack) * TECH_WEIGHT,
        "description": (
            LONG_DESCRIPTION_BONUS
            if len(entry.description or "") > LONG_DESCRIPTION_CHARS
            else SHORT_DESCRIPTION_BONUS
        ),
        "recency": _recency_bonus(entry.registered_at, now),
    }
    return ScoredContestant(entry=entry, score=sum(breakdown.values()), breakdown=breakdown)


def build_reason(scored: ScoredContestant) -> str:
    """Human readable justification for the pick"""
    entry = scored.entry
    tech_stack = entry.tech_stack or []
    reasons = []
    if entry.likes_count > 5:
        reasons.append(f"{entry.likes_count} likes from the community")
    if entry.comments_count > 3:
        reasons.append(f"{entry.comments_count} engaging comments")
    if len(tech_stack) > 3:
        reasons.append(f"diverse tech stack ({', '.join(tech_stack[:3])})")
    if len(entry.description or "") > LONG_DESCRIPTION_CHARS:
        reasons.append("comprehensive project description")

    if not reasons:
        return DEFAULT_REASON
    return f"Selected for {', '.join(reasons)}."


def rank(entries: Sequence[ScoreInput], now: datetime) -> List[ScoredContestant]:
    """Highest score first; ties keep input order"""
    scored = [score_contestant(entry, now) for entry in entries]
    # sorted() is stable, so the first-seen contestant wins a tie
    return sorted(scored, key=lambda item: item.score, reverse=True)


def pick_winner(
    entries: Sequence[ScoreInput],
    now: datetime,
    week_number: Optional[int] = None,
    year: Optional[int] = None,
) -> Tuple[ScoredContestant, List[ScoredContestant]]:
    if not entries:
        raise NoContestantsError(week_number, year)
    ranked = rank(entries, now)
    return ranked[0], ranked
