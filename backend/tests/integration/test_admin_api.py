"""
Integration Tests for the admin dashboard, moderation and award views
"""
from datetime import datetime

from sqlalchemy import select

from app.models.certificate import Certificate
from app.models.project import Project
from app.models.report import Report
from app.models.user import User

SUNDAY = datetime(2024, 6, 16, 12, 0)


async def report(client, project, headers, reason='Plagiarised'):
    response = await client.post(
        f'/api/v1/projects/{project.id}/report', json={'reason': reason}, headers=headers
    )
    return response.json()['reportId']


async def crown(client, contest_clock, project, owner_headers, admin_headers):
    await client.post(f'/api/v1/contest/register/{project.id}', headers=owner_headers)
    contest_clock.frozen_at = SUNDAY
    return await client.post(
        '/api/v1/contest/approve',
        json={'projectId': project.id, 'reason': 'Polished and useful'},
        headers=admin_headers,
    )


class TestDashboard:

    async def test_stats(
        self, client, contest_clock, test_project, test_user, other_user, make_user,
        auth_headers, other_headers, admin_auth_headers
    ):
        await make_user(is_suspended=True)
        await client.post(f'/api/v1/projects/{test_project.id}/like', headers=other_headers)
        await client.post(
            f'/api/v1/projects/{test_project.id}/comment', json={'text': 'Great'}, headers=other_headers
        )
        await report(client, test_project, other_headers)
        await crown(client, contest_clock, test_project, auth_headers, admin_auth_headers)

        response = await client.get('/api/v1/admin/stats', headers=admin_auth_headers)

        assert response.status_code == 200
        stats = response.json()
        assert stats['totalUsers'] == 4
        assert stats['suspendedUsers'] == 1
        assert stats['totalProjects'] == 1
        assert stats['pendingReports'] == 1
        assert stats['totalAwards'] == 1
        assert stats['totalLikes'] == 1
        assert stats['totalComments'] == 1
        assert [u['name'] for u in stats['topUsers']] == ['Asha Rao']
        assert stats['topUsers'][0]['wins'] == 1


class TestUserManagement:

    async def test_list_users_with_friend_counts(
        self, client, test_user, other_user, befriend, admin_auth_headers
    ):
        await befriend(test_user, other_user)

        response = await client.get('/api/v1/admin/users', headers=admin_auth_headers)

        counts = {u['id']: u['friendsCount'] for u in response.json()}
        assert counts[test_user.id] == 1
        assert counts[other_user.id] == 1
        assert len(counts) == 3

    async def test_suspend_and_unsuspend(self, client, db_session, test_user, auth_headers, admin_auth_headers):
        suspended = await client.put(f'/api/v1/admin/users/{test_user.id}/suspend', headers=admin_auth_headers)
        blocked = await client.get('/api/v1/auth/me', headers=auth_headers)
        unsuspended = await client.put(
            f'/api/v1/admin/users/{test_user.id}/unsuspend', headers=admin_auth_headers
        )
        allowed = await client.get('/api/v1/auth/me', headers=auth_headers)

        assert suspended.json()['user']['isSuspended'] is True
        assert blocked.status_code == 403
        assert unsuspended.json()['user']['isSuspended'] is False
        assert allowed.status_code == 200

    async def test_cannot_suspend_admin(self, client, admin_user, admin_auth_headers):
        response = await client.put(
            f'/api/v1/admin/users/{admin_user.id}/suspend', headers=admin_auth_headers
        )
        assert response.status_code == 400

    async def test_unknown_user(self, client, admin_auth_headers):
        response = await client.put('/api/v1/admin/users/nobody/suspend', headers=admin_auth_headers)
        assert response.status_code == 404


class TestProjectManagement:

    async def test_list_and_delete(self, client, db_session, test_project, admin_auth_headers):
        listed = await client.get('/api/v1/admin/projects', headers=admin_auth_headers)
        deleted = await client.delete(f'/api/v1/admin/projects/{test_project.id}', headers=admin_auth_headers)

        assert listed.json()[0]['owner']['email']
        assert deleted.status_code == 200
        assert await db_session.scalar(select(Project).where(Project.id == test_project.id)) is None


class TestReports:

    async def test_pending_reports_listed(self, client, test_project, other_headers, admin_auth_headers):
        await report(client, test_project, other_headers, reason='Spam')

        response = await client.get('/api/v1/admin/reports', headers=admin_auth_headers)

        assert len(response.json()) == 1
        entry = response.json()[0]
        assert entry['reason'] == 'Spam'
        assert entry['reporter']['name'] == 'Vikram Iyer'
        assert entry['project']['title'] == 'Campus Navigator'

    async def test_approved_dismisses(self, client, db_session, test_project, other_headers, admin_auth_headers):
        report_id = await report(client, test_project, other_headers)

        response = await client.post(
            f'/api/v1/admin/reports/{report_id}/resolve', json={'action': 'approved'}, headers=admin_auth_headers
        )
        again = await client.post(
            f'/api/v1/admin/reports/{report_id}/resolve', json={'action': 'approved'}, headers=admin_auth_headers
        )

        assert response.status_code == 200
        assert again.status_code == 400
        stored = await db_session.get(Report, report_id)
        assert stored.status.value == 'dismissed'
        assert (await client.get('/api/v1/admin/reports', headers=admin_auth_headers)).json() == []

    async def test_deleted_removes_project_and_keeps_report(
        self, client, db_session, test_project, auth_headers, other_headers, admin_auth_headers
    ):
        await client.post('/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers)
        report_id = await report(client, test_project, other_headers)

        response = await client.post(
            f'/api/v1/admin/reports/{report_id}/resolve', json={'action': 'deleted'}, headers=admin_auth_headers
        )

        assert response.status_code == 200
        assert await db_session.scalar(select(Project).where(Project.id == test_project.id)) is None
        stored = await db_session.scalar(select(Report).where(Report.id == report_id))
        assert stored.project_id is None
        assert stored.status.value == 'resolved'
        assert stored.action.value == 'deleted'
        certificate = await db_session.scalar(select(Certificate))
        assert certificate.project_id is None

    async def test_suspended_suspends_owner(
        self, client, db_session, test_project, test_user, other_headers, admin_auth_headers
    ):
        report_id = await report(client, test_project, other_headers)

        await client.post(
            f'/api/v1/admin/reports/{report_id}/resolve', json={'action': 'suspended'}, headers=admin_auth_headers
        )

        owner = await db_session.scalar(
            select(User).where(User.id == test_user.id).execution_options(populate_existing=True)
        )
        assert owner.is_suspended is True

    async def test_cannot_suspend_admin_owner(
        self, client, make_project, admin_user, other_headers, admin_auth_headers
    ):
        project = await make_project(admin_user)
        report_id = await report(client, project, other_headers)

        response = await client.post(
            f'/api/v1/admin/reports/{report_id}/resolve', json={'action': 'suspended'}, headers=admin_auth_headers
        )
        assert response.status_code == 400

    async def test_invalid_action(self, client, test_project, other_headers, admin_auth_headers):
        report_id = await report(client, test_project, other_headers)

        response = await client.post(
            f'/api/v1/admin/reports/{report_id}/resolve', json={'action': 'banished'}, headers=admin_auth_headers
        )
        assert response.status_code == 422

    async def test_unknown_report(self, client, admin_auth_headers):
        response = await client.post(
            '/api/v1/admin/reports/3f1c2b7e-0000-4000-8000-000000000000/resolve',
            json={'action': 'approved'},
            headers=admin_auth_headers,
        )
        assert response.status_code == 404


class TestProjectOfTheWeekAdmin:

    async def test_current_and_history(
        self, client, contest_clock, test_project, auth_headers, admin_auth_headers
    ):
        before = await client.get('/api/v1/admin/project-of-week/current', headers=admin_auth_headers)
        await crown(client, contest_clock, test_project, auth_headers, admin_auth_headers)
        current = await client.get('/api/v1/admin/project-of-week/current', headers=admin_auth_headers)
        history = await client.get('/api/v1/admin/project-of-week/history', headers=admin_auth_headers)

        assert before.json() == {'active': False, 'potw': None}
        assert current.json()['active'] is True
        assert current.json()['potw']['project']['title'] == 'Campus Navigator'
        assert current.json()['potw']['owner']['powWins'] == 1
        assert len(history.json()) == 1

    async def test_current_after_expiry(
        self, client, contest_clock, test_project, auth_headers, admin_auth_headers
    ):
        await crown(client, contest_clock, test_project, auth_headers, admin_auth_headers)
        contest_clock.frozen_at = datetime(2024, 6, 23, 0, 1)

        response = await client.get('/api/v1/admin/project-of-week/current', headers=admin_auth_headers)

        assert response.json()['active'] is False

    async def test_award_winners(
        self, client, contest_clock, test_project, test_user, auth_headers, admin_auth_headers
    ):
        await crown(client, contest_clock, test_project, auth_headers, admin_auth_headers)

        response = await client.get('/api/v1/admin/awards/users', headers=admin_auth_headers)

        assert response.json() == [{
            'id': test_user.id,
            'name': 'Asha Rao',
            'email': test_user.email,
            'avatarUrl': test_user.avatar_url,
            'section': 'CSE-A',
            'wins': 1,
        }]

    async def test_admin_views_need_admin(self, client, auth_headers):
        for path in ('/api/v1/admin/users', '/api/v1/admin/reports', '/api/v1/admin/awards/users'):
            response = await client.get(path, headers=auth_headers)
            assert response.status_code == 403


