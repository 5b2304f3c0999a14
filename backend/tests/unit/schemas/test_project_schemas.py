"""
Unit Tests for Project, Contest and Social Schemas
Tests for: camelCase input, validation, defaults
"""
import pytest
from pydantic import ValidationError

from app.models.contest import ContestPhase
from app.models.project import ProjectVisibility
from app.models.report import ReportAction
from app.schemas.admin import ResolveReportRequest
from app.schemas.certificate import ContestCertificateRequest
from app.schemas.contest import ApproveRequest, PhaseUpdate
from app.schemas.project import ProjectCreate, ProjectUpdate, Challenges
from app.schemas.social import FriendRequestCreate
from app.schemas.user import ProfileUpdate


class TestProjectCreate:
    """Test ProjectCreate schema"""

    def test_camel_case_input(self):
        project = ProjectCreate(
            title="Campus Navigator",
            description="Indoor maps",
            techStack=["Flutter", "Firebase"],
            githubUrl="https://github.com/example/nav",
        )

        assert project.tech_stack == ["Flutter", "Firebase"]
        assert project.github_url == "https://github.com/example/nav"
        assert project.visibility == ProjectVisibility.PUBLIC

    def test_snake_case_input(self):
        project = ProjectCreate(title="A", description="B", tech_stack=["Go"])
        assert project.tech_stack == ["Go"]

    def test_tech_stack_is_cleaned(self):
        project = ProjectCreate(title="A", description="B", techStack=[" React ", "", "  "])
        assert project.tech_stack == ["React"]

    def test_title_required(self):
        with pytest.raises(ValidationError):
            ProjectCreate(description="No title")

    def test_empty_title_fails(self):
        with pytest.raises(ValidationError):
            ProjectCreate(title="", description="B")

    def test_friends_visibility(self):
        project = ProjectCreate(title="A", description="B", visibility="friends")
        assert project.visibility == ProjectVisibility.FRIENDS

    def test_unknown_visibility_fails(self):
        with pytest.raises(ValidationError):
            ProjectCreate(title="A", description="B", visibility="secret")


class TestProjectUpdate:

    def test_partial_update_only_sets_given_fields(self):
        update = ProjectUpdate(title="New title")
        assert update.model_dump(exclude_unset=True) == {"title": "New title"}

    def test_challenges_defaults(self):
        assert Challenges().model_dump() == {"faced": "", "learned": "", "explored": ""}


class TestContestSchemas:

    def test_approve_request(self):
        body = ApproveRequest(projectId="p1", reason="Great", score=72)
        assert body.project_id == "p1"
        assert body.score == 72

    def test_approve_request_negative_score_fails(self):
        with pytest.raises(ValidationError):
            ApproveRequest(projectId="p1", score=-1)

    def test_approve_request_fields_optional(self):
        body = ApproveRequest()
        assert body.project_id is None

    def test_phase_update(self):
        assert PhaseUpdate(phase="evaluation").phase == ContestPhase.EVALUATION
        assert PhaseUpdate().phase is None

    def test_phase_update_unknown_phase(self):
        with pytest.raises(ValidationError):
            PhaseUpdate(phase="judging")

    def test_contest_certificate_request(self):
        body = ContestCertificateRequest(projectId="p1", certificateType="winner")
        assert body.certificate_type == "winner"


class TestSocialAndAdminSchemas:

    def test_friend_request_camel_case(self):
        assert FriendRequestCreate(receiverId="u2").receiver_id == "u2"

    def test_profile_update(self):
        update = ProfileUpdate(avatarUrl="https://example.com/a.png")
        assert update.model_dump(exclude_unset=True) == {"avatar_url": "https://example.com/a.png"}

    def test_resolve_report_action(self):
        assert ResolveReportRequest(action="deleted").action == ReportAction.DELETED

    def test_resolve_report_unknown_action(self):
        with pytest.raises(ValidationError):
            ResolveReportRequest(action="banished")
