"""
Integration Tests for registration, login and the current user
"""
import pytest

from app.models.user import UserRole


def register_payload(**overrides):
    payload = {
        'name': 'Meera Nair',
        'email': 'meera@example.com',
        'password': 'securepass123',
        'section': 'CSE-B',
    }
    payload.update(overrides)
    return payload


class TestRegister:

    async def test_register_returns_token_and_user(self, client):
        response = await client.post('/api/v1/auth/register', json=register_payload())

        assert response.status_code == 201
        data = response.json()
        assert data['token']
        assert data['user']['email'] == 'meera@example.com'
        assert data['user']['role'] == 'user'
        assert data['user']['powWins'] == 0
        assert 'hashed_password' not in data['user']

    async def test_email_is_case_insensitive(self, client):
        await client.post('/api/v1/auth/register', json=register_payload())
        response = await client.post(
            '/api/v1/auth/register', json=register_payload(email='MEERA@example.com')
        )

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'EMAIL_TAKEN'

    async def test_only_one_admin(self, client, admin_user):
        response = await client.post(
            '/api/v1/auth/register',
            json=register_payload(role='admin'),
        )

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'ADMIN_EXISTS'

    async def test_first_admin_allowed(self, client):
        response = await client.post(
            '/api/v1/auth/register',
            json=register_payload(role='admin'),
        )

        assert response.status_code == 201
        assert response.json()['user']['role'] == 'admin'

    @pytest.mark.parametrize('field,value', [
        ('email', 'not-an-email'),
        ('password', 'short'),
        ('section', '   '),
        ('name', ''),
    ])
    async def test_invalid_payload(self, client, field, value):
        response = await client.post('/api/v1/auth/register', json=register_payload(**{field: value}))

        assert response.status_code == 422
        assert response.json()['error']['code'] == 'VALIDATION_ERROR'


class TestLogin:

    async def test_login(self, client, test_user):
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': test_user.email, 'password': 'testpassword123'},
        )

        assert response.status_code == 200
        assert response.json()['user']['id'] == test_user.id

    async def test_wrong_password(self, client, test_user):
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': test_user.email, 'password': 'wrongpassword'},
        )

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'INVALID_CREDENTIALS'

    async def test_unknown_email(self, client):
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': 'nobody@example.com', 'password': 'whatever123'},
        )

        assert response.status_code == 401

    async def test_suspended_user_cannot_login(self, client, make_user):
        user = await make_user(is_suspended=True)

        response = await client.post(
            '/api/v1/auth/login',
            json={'email': user.email, 'password': 'testpassword123'},
        )

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'ACCOUNT_SUSPENDED'


class TestCurrentUser:

    async def test_me(self, client, test_user, auth_headers):
        response = await client.get('/api/v1/auth/me', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['name'] == 'Asha Rao'

    async def test_missing_token(self, client):
        response = await client.get('/api/v1/auth/me')

        # HTTPBearer answers 403 on older FastAPI releases, 401 on newer ones
        assert response.status_code in (401, 403)

    async def test_garbage_token(self, client):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer nonsense'})

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'INVALID_TOKEN'

    async def test_suspended_token_rejected(self, client, make_user, headers_for):
        user = await make_user(is_suspended=True)

        response = await client.get('/api/v1/auth/me', headers=headers_for(user))

        assert response.status_code == 403

    async def test_admin_route_requires_admin(self, client, auth_headers, admin_auth_headers):
        as_user = await client.get('/api/v1/admin/stats', headers=auth_headers)
        as_admin = await client.get('/api/v1/admin/stats', headers=admin_auth_headers)

        assert as_user.status_code == 403
        assert as_user.json()['error']['code'] == 'ADMIN_REQUIRED'
        assert as_admin.status_code == 200


def test_roles_are_plain_strings():
    assert UserRole.ADMIN.value == 'admin'
    assert UserRole.USER.value == 'user'
