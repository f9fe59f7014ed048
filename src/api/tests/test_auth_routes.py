"""Tests for /api/auth routes using in-memory fakes."""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient

from adapter.fake.notifier import FakeNotifier
from adapter.fake.user_repository import FakeUserRepository
from api.dependencies import get_notifier, get_user_repo
from api.main import app
from api.security import create_access_token, verify_token
from domain.model.errors import PersistenceError, SigningError
from services import auth_service


class AuthRouteTestCase(unittest.TestCase):

    def setUp(self):
        patcher = patch.object(auth_service, 'BCRYPT_ROUNDS', 4)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.repo = FakeUserRepository()
        self.notifier = FakeNotifier()
        app.dependency_overrides[get_user_repo] = lambda: self.repo
        app.dependency_overrides[get_notifier] = lambda: self.notifier
        self.client = TestClient(app)

        self.user = self.repo.create(
            email='a@b.com', password_hash=auth_service._hash_password('secret'), name='Ann',
        )
        self.repo.store[self.user.id].is_verified = True

    def tearDown(self):
        app.dependency_overrides.clear()

    def request_reset(self) -> str:
        response = self.client.post('/api/auth/recover', json={'email': 'a@b.com'})
        self.assertEqual(response.status_code, 200)
        return self.repo.get_by_id(self.user.id).reset_token


class TestLogin(AuthRouteTestCase):

    def test_login_returns_token_for_user(self):
        response = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'secret'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(verify_token(response.json()['token']), self.user.id)

    def test_wrong_password_and_unknown_email_look_the_same(self):
        wrong = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'wrong'})
        unknown = self.client.post('/api/auth', json={'email': 'x@b.com', 'password': 'secret'})

        self.assertEqual(wrong.status_code, 400)
        self.assertEqual(unknown.status_code, 400)
        self.assertEqual(wrong.json(), unknown.json())
        self.assertEqual(wrong.json()['detail'], 'Invalid Credentials')

    def test_unverified_account(self):
        self.repo.store[self.user.id].is_verified = False

        response = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'secret'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['detail']['type'], 'not-verified')

    def test_malformed_email_is_field_level_400(self):
        response = self.client.post('/api/auth', json={'email': 'not-an-email', 'password': 'secret'})

        self.assertEqual(response.status_code, 400)
        params = [e['param'] for e in response.json()['errors']]
        self.assertIn('email', params)

    def test_signing_failure_is_500(self):
        with patch('api.routes.auth.create_access_token', side_effect=SigningError('bad key')):
            response = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'secret'})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['detail'], 'Server Error')

    def test_unsupported_signing_algorithm_is_500(self):
        with patch('api.security.JWT_ALGORITHM', 'HS999'):
            response = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'secret'})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['detail'], 'Server Error')

    def test_password_over_bcrypt_limit_is_invalid_credentials(self):
        response = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'x' * 100})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['detail'], 'Invalid Credentials')

    def test_store_failure_is_500(self):
        with patch.object(self.repo, 'get_by_email', side_effect=PersistenceError('down')):
            response = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'secret'})

        self.assertEqual(response.status_code, 500)


class TestCurrentUser(AuthRouteTestCase):

    def test_get_user_with_x_auth_token(self):
        token = create_access_token(self.user.id)

        response = self.client.get('/api/auth', headers={'x-auth-token': token})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['email'], 'a@b.com')
        self.assertNotIn('password_hash', body)
        self.assertNotIn('reset_token', body)

    def test_get_user_with_bearer(self):
        token = create_access_token(self.user.id)

        response = self.client.get('/api/auth', headers={'Authorization': f'Bearer {token}'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['id'], self.user.id)

    def test_missing_token(self):
        self.assertEqual(self.client.get('/api/auth').status_code, 401)

    def test_invalid_token(self):
        response = self.client.get('/api/auth', headers={'x-auth-token': 'garbage'})
        self.assertEqual(response.status_code, 401)

    def test_lookup_error_is_500(self):
        token = create_access_token(self.user.id)
        with patch.object(self.repo, 'get_by_id', side_effect=PersistenceError('down')):
            response = self.client.get('/api/auth', headers={'x-auth-token': token})

        self.assertEqual(response.status_code, 500)


class TestRecover(AuthRouteTestCase):

    def test_recover_sends_reset_link(self):
        response = self.client.post('/api/auth/recover', json={'email': 'a@b.com'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, 'A verification email has been sent to a@b.com')
        token = self.repo.get_by_id(self.user.id).reset_token
        self.assertIn(f'http://testserver/api/auth/reset/{token}', self.notifier.sent[-1].html)

    def test_recover_unknown_email(self):
        response = self.client.post('/api/auth/recover', json={'email': 'ghost@b.com'})

        self.assertEqual(response.status_code, 401)
        self.assertIn('ghost@b.com', response.json()['detail'])
        self.assertEqual(self.notifier.sent, [])
        self.assertIsNone(self.repo.get_by_id(self.user.id).reset_token)

    def test_recover_delivery_failure_is_500_but_token_kept(self):
        self.notifier.fail = True

        response = self.client.post('/api/auth/recover', json={'email': 'a@b.com'})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['detail'], 'Server Error')
        self.assertIsNotNone(self.repo.get_by_id(self.user.id).reset_token)


class TestReset(AuthRouteTestCase):

    def test_check_valid_token(self):
        token = self.request_reset()

        response = self.client.get(f'/api/auth/reset/{token}')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.repo.get_by_id(self.user.id).reset_token, token)

    def test_check_unknown_token(self):
        response = self.client.get('/api/auth/reset/unknown')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['detail'], 'Password reset token is invalid or has expired')

    def test_check_expired_token(self):
        token = self.request_reset()
        self.repo.store[self.user.id].reset_expiry = datetime.now(timezone.utc) - timedelta(seconds=1)

        self.assertEqual(self.client.get(f'/api/auth/reset/{token}').status_code, 401)
        response = self.client.post(f'/api/auth/reset/{token}', json={'password': 'newpass1'})
        self.assertEqual(response.status_code, 401)

    def test_reset_then_login_with_new_password(self):
        token = self.request_reset()

        response = self.client.post(f'/api/auth/reset/{token}', json={'password': 'newpass1'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, 'Your password has been updated.')
        self.assertEqual(self.notifier.sent[-1].subject, 'Your password has been changed')
        login = self.client.post('/api/auth', json={'email': 'a@b.com', 'password': 'newpass1'})
        self.assertEqual(login.status_code, 200)

    def test_reset_token_reuse_is_rejected(self):
        token = self.request_reset()
        self.client.post(f'/api/auth/reset/{token}', json={'password': 'newpass1'})

        response = self.client.post(f'/api/auth/reset/{token}', json={'password': 'newpass2'})

        self.assertEqual(response.status_code, 401)

    def test_short_password_is_400_and_changes_nothing(self):
        token = self.request_reset()
        before = self.repo.get_by_id(self.user.id)

        response = self.client.post(f'/api/auth/reset/{token}', json={'password': '12345'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'][0]['param'], 'password')
        self.assertEqual(self.repo.get_by_id(self.user.id), before)

    def test_password_over_bcrypt_limit_is_400_and_token_kept(self):
        token = self.request_reset()

        response = self.client.post(f'/api/auth/reset/{token}', json={'password': 'x' * 100})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.repo.get_by_id(self.user.id).reset_token, token)


if __name__ == '__main__':
    unittest.main()
