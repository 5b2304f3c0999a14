"""
Unit Tests for Project of the Week scoring
"""
from datetime import datetime, timedelta

import pytest

from app.core.exceptions import NoContestantsError
from app.services.scoring_service import (
    DEFAULT_REASON,
    ScoreInput,
    build_reason,
    pick_winner,
    rank,
    score_contestant,
)

NOW = datetime(2024, 6, 16, 12, 0)


def make_entry(project_id="p1", likes=0, comments=0, tech=None, description="short",
               registered_at=None) -> ScoreInput:
    return ScoreInput(
        project_id=project_id,
        contestant_id=f"c-{project_id}",
        user_id=f"u-{project_id}",
        title=f"Project {project_id}",
        description=description,
        tech_stack=tech or [],
        likes_count=likes,
        comments_count=comments,
        registered_at=registered_at or NOW,
    )


class TestScoreContestant:

    def test_reference_snapshot_scores_exactly(self):
        """likes=5, comments=3, four technologies, 250 char description, registered a day ago"""
        entry = make_entry(
            likes=5,
            comments=3,
            tech=["a", "b", "c", "d"],
            description="x" * 250,
            registered_at=NOW - timedelta(days=1),
        )

        scored = score_contestant(entry, NOW)

        assert scored.score == 15 + 15 + 8 + 10 + 6
        assert scored.breakdown == {
            "likes": 15,
            "comments": 15,
            "techStack": 8,
            "description": 10,
            "recency": 6,
        }

    def test_same_input_same_score(self):
        entry = make_entry(likes=2, comments=1, tech=["Go"])
        assert score_contestant(entry, NOW).score == score_contestant(entry, NOW).score

    def test_description_of_exactly_200_chars_gets_short_bonus(self):
        scored = score_contestant(make_entry(description="x" * 200), NOW)
        assert scored.breakdown["description"] == 5

    def test_recency_bonus_counts_whole_days_and_floors_at_zero(self):
        almost_two_days = make_entry(registered_at=NOW - timedelta(days=1, hours=23))
        long_ago = make_entry(registered_at=NOW - timedelta(days=30))

        assert score_contestant(almost_two_days, NOW).breakdown["recency"] == 6
        assert score_contestant(long_ago, NOW).breakdown["recency"] == 0

    def test_empty_tech_stack(self):
        entry = make_entry()
        entry.tech_stack = None
        assert score_contestant(entry, NOW).breakdown["techStack"] == 0


class TestRanking:

    def test_highest_score_first(self):
        low = make_entry("low", likes=1)
        high = make_entry("high", likes=10)

        ranked = rank([low, high], NOW)

        assert [s.entry.project_id for s in ranked] == ["high", "low"]

    def test_tie_goes_to_first_seen(self):
        first = make_entry("first", likes=2)
        second = make_entry("second", likes=2)

        winner, ranked = pick_winner([first, second], NOW)

        assert winner.entry.project_id == "first"
        assert len(ranked) == 2

    def test_empty_list_raises(self):
        with pytest.raises(NoContestantsError) as exc_info:
            pick_winner([], NOW, week_number=24, year=2024)

        assert exc_info.value.status_code == 404


class TestBuildReason:

    def test_lists_components_over_threshold(self):
        entry = make_entry(
            likes=10,
            comments=4,
            tech=["React", "Node", "Mongo", "Redis"],
            description="y" * 300,
        )

        reason = build_reason(score_contestant(entry, NOW))

        assert reason == (
            "Selected for 10 likes from the community, 4 engaging comments, "
            "diverse tech stack (React, Node, Mongo), comprehensive project description."
        )

    def test_falls_back_to_default(self):
        assert build_reason(score_contestant(make_entry(), NOW)) == DEFAULT_REASON

    def test_to_dict_uses_client_keys(self):
        data = score_contestant(make_entry("p9", likes=1), NOW).to_dict()
        assert data["projectId"] == "p9"
        assert data["contestantId"] == "c-p9"
        assert set(data) == {"contestantId", "projectId", "title", "score", "breakdown"}
