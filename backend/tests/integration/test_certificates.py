"""
Integration Tests for certificate issuance and download
"""
from datetime import datetime

from sqlalchemy import select, func

from app.models.certificate import Certificate

SUNDAY = datetime(2024, 6, 16, 12, 0)


async def count_certificates(db_session) -> int:
    return await db_session.scalar(select(func.count(Certificate.id)))


async def crown(client, contest_clock, winner_project, winner_headers, admin_headers, runner_up=None):
    """Register on Saturday, approve the winner on Sunday"""
    await client.post(f'/api/v1/contest/register/{winner_project.id}', headers=winner_headers)
    if runner_up:
        project, headers = runner_up
        await client.post(f'/api/v1/contest/register/{project.id}', headers=headers)
    contest_clock.frozen_at = SUNDAY
    await client.post(
        '/api/v1/contest/approve',
        json={'projectId': winner_project.id, 'reason': 'Great work'},
        headers=admin_headers,
    )


class TestCompletionCertificate:

    async def test_generate_is_idempotent(self, client, db_session, uploads_dir, test_project, auth_headers):
        first = await client.post(
            '/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers
        )
        second = await client.post(
            '/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers
        )

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()['certificateId'] == second.json()['certificateId']
        assert second.json()['message'] == 'Certificate already exists'
        assert await count_certificates(db_session) == 1

        certificate_id = first.json()['certificateId']
        assert first.json()['certificateUrl'] == f'/uploads/certificates/{certificate_id}.pdf'
        pdf = uploads_dir / 'certificates' / f'{certificate_id}.pdf'
        assert pdf.read_bytes().startswith(b'%PDF')

    async def test_only_owner(self, client, test_project, other_headers):
        response = await client.post(
            '/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=other_headers
        )
        assert response.status_code == 403

    async def test_missing_project_id(self, client, auth_headers):
        response = await client.post('/api/v1/certificates/generate', json={}, headers=auth_headers)
        assert response.status_code == 400

    async def test_unknown_project(self, client, auth_headers):
        response = await client.post(
            '/api/v1/certificates/generate',
            json={'projectId': '3f1c2b7e-0000-4000-8000-000000000000'},
            headers=auth_headers,
        )
        assert response.status_code == 404

    async def test_check(self, client, test_project, auth_headers):
        before = await client.get(f'/api/v1/certificates/check/{test_project.id}', headers=auth_headers)
        issued = await client.post(
            '/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers
        )
        after = await client.get(f'/api/v1/certificates/check/{test_project.id}', headers=auth_headers)

        assert before.json() == {'exists': False}
        assert after.json()['exists'] is True
        assert after.json()['certificateId'] == issued.json()['certificateId']


class TestContestCertificate:

    async def test_not_eligible_without_contest_result(self, client, test_project, auth_headers):
        response = await client.post(
            '/api/v1/certificates/generate-contest',
            json={'projectId': test_project.id, 'certificateType': 'winner'},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'NOT_ELIGIBLE'

    async def test_winner_certificate_is_idempotent(
        self, client, contest_clock, db_session, test_project, auth_headers, admin_auth_headers
    ):
        await crown(client, contest_clock, test_project, auth_headers, admin_auth_headers)
        body = {'projectId': test_project.id, 'certificateType': 'winner'}

        first = await client.post('/api/v1/certificates/generate-contest', json=body, headers=auth_headers)
        second = await client.post('/api/v1/certificates/generate-contest', json=body, headers=auth_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()['certificateType'] == 'winner'
        assert first.json()['certificateId'].startswith('NIAT-POTW-WINNER-W24-2024-')
        assert first.json()['certificateId'] == second.json()['certificateId']
        assert await count_certificates(db_session) == 1

    async def test_each_winning_week_gets_its_own_certificate(
        self, client, contest_clock, db_session, test_project, auth_headers, admin_auth_headers
    ):
        body = {'projectId': test_project.id, 'certificateType': 'winner'}
        await crown(client, contest_clock, test_project, auth_headers, admin_auth_headers)
        week_24 = await client.post('/api/v1/certificates/generate-contest', json=body, headers=auth_headers)

        contest_clock.frozen_at = datetime(2024, 6, 22, 12, 0)
        await client.post(f'/api/v1/contest/register/{test_project.id}', headers=auth_headers)
        contest_clock.frozen_at = datetime(2024, 6, 23, 12, 0)
        await client.post(
            '/api/v1/contest/approve',
            json={'projectId': test_project.id, 'reason': 'Still the best'},
            headers=admin_auth_headers,
        )
        week_25 = await client.post('/api/v1/certificates/generate-contest', json=body, headers=auth_headers)
        again = await client.post('/api/v1/certificates/generate-contest', json=body, headers=auth_headers)

        assert week_24.status_code == 201
        assert week_24.json()['certificateId'].startswith('NIAT-POTW-WINNER-W24-2024-')
        assert week_25.status_code == 201
        assert week_25.json()['certificateId'].startswith('NIAT-POTW-WINNER-W25-2024-')
        assert again.json()['certificateId'] == week_25.json()['certificateId']
        assert await count_certificates(db_session) == 2

    async def test_participant_certificate(
        self, client, contest_clock, make_project, test_project, other_user, auth_headers,
        other_headers, admin_auth_headers
    ):
        runner_up = await make_project(other_user)
        await crown(
            client, contest_clock, test_project, auth_headers, admin_auth_headers,
            runner_up=(runner_up, other_headers),
        )

        as_winner = await client.post(
            '/api/v1/certificates/generate-contest',
            json={'projectId': runner_up.id, 'certificateType': 'winner'},
            headers=other_headers,
        )
        as_participant = await client.post(
            '/api/v1/certificates/generate-contest',
            json={'projectId': runner_up.id, 'certificateType': 'participant'},
            headers=other_headers,
        )

        assert as_winner.status_code == 403
        assert as_participant.status_code == 201
        assert as_participant.json()['certificateType'] == 'participant'

    async def test_invalid_type(self, client, test_project, auth_headers):
        for certificate_type in ('completion', 'gold', None):
            response = await client.post(
                '/api/v1/certificates/generate-contest',
                json={'projectId': test_project.id, 'certificateType': certificate_type},
                headers=auth_headers,
            )
            assert response.status_code == 400

    async def test_completion_and_winner_are_separate(
        self, client, contest_clock, db_session, test_project, auth_headers, admin_auth_headers
    ):
        await crown(client, contest_clock, test_project, auth_headers, admin_auth_headers)

        completion = await client.post(
            '/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers
        )
        winner = await client.post(
            '/api/v1/certificates/generate-contest',
            json={'projectId': test_project.id, 'certificateType': 'winner'},
            headers=auth_headers,
        )

        assert completion.status_code == 201
        assert winner.status_code == 201
        assert completion.json()['certificateId'] != winner.json()['certificateId']
        assert await count_certificates(db_session) == 2


class TestMyCertificatesAndDownload:

    async def test_my_certificates(self, client, test_project, auth_headers, other_headers):
        await client.post('/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers)

        mine = await client.get('/api/v1/certificates/my-certificates', headers=auth_headers)
        theirs = await client.get('/api/v1/certificates/my-certificates', headers=other_headers)

        assert len(mine.json()) == 1
        assert mine.json()[0]['projectTitle'] == 'Campus Navigator'
        assert mine.json()[0]['certificateType'] == 'completion'
        assert theirs.json() == []

    async def test_certificate_survives_project_deletion(self, client, test_project, auth_headers):
        await client.post('/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers)

        deleted = await client.delete(f'/api/v1/projects/{test_project.id}', headers=auth_headers)
        mine = await client.get('/api/v1/certificates/my-certificates', headers=auth_headers)

        assert deleted.status_code == 200
        assert mine.json()[0]['projectId'] is None
        assert mine.json()[0]['projectTitle'] == 'Campus Navigator'

    async def test_download(self, client, test_project, auth_headers):
        issued = await client.post(
            '/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers
        )
        certificate_id = issued.json()['certificateId']

        response = await client.get(f'/api/v1/certificates/{certificate_id}/download', headers=auth_headers)

        assert response.status_code == 200
        assert response.headers['content-type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')

    async def test_download_unknown_certificate(self, client, auth_headers):
        response = await client.get('/api/v1/certificates/NIAT-0-NOPE/download', headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'CERTIFICATE_NOT_FOUND'

    async def test_download_missing_file(self, client, uploads_dir, test_project, auth_headers):
        issued = await client.post(
            '/api/v1/certificates/generate', json={'projectId': test_project.id}, headers=auth_headers
        )
        certificate_id = issued.json()['certificateId']
        (uploads_dir / 'certificates' / f'{certificate_id}.pdf').unlink()

        response = await client.get(f'/api/v1/certificates/{certificate_id}/download', headers=auth_headers)

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'CERTIFICATE_FILE_MISSING'
