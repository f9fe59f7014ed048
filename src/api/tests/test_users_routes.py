"""Tests for /api/users registration and verification routes."""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from adapter.fake.notifier import FakeNotifier
from adapter.fake.user_repository import FakeUserRepository
from api.dependencies import get_notifier, get_user_repo
from api.main import app
from services import auth_service


class TestUsersRoutes(unittest.TestCase):

    def setUp(self):
        patcher = patch.object(auth_service, 'BCRYPT_ROUNDS', 4)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.repo = FakeUserRepository()
        self.notifier = FakeNotifier()
        app.dependency_overrides[get_user_repo] = lambda: self.repo
        app.dependency_overrides[get_notifier] = lambda: self.notifier
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def register(self, email='new@b.com', password='secret1'):
        return self.client.post(
            '/api/users', json={'name': 'New', 'email': email, 'password': password},
        )

    def test_register_returns_public_user(self):
        response = self.register()

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['email'], 'new@b.com')
        self.assertFalse(body['is_verified'])
        self.assertNotIn('password_hash', body)
        self.assertNotIn('verification_token', body)

    def test_register_duplicate(self):
        self.register()
        self.assertEqual(self.register().status_code, 409)

    def test_register_short_password(self):
        response = self.register(password='123')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.repo.store, {})

    def test_register_verify_login(self):
        user_id = self.register().json()['id']
        token = self.repo.get_by_id(user_id).verification_token

        blocked = self.client.post('/api/auth', json={'email': 'new@b.com', 'password': 'secret1'})
        verify = self.client.get(f'/api/users/verify/{token}')
        login = self.client.post('/api/auth', json={'email': 'new@b.com', 'password': 'secret1'})

        self.assertEqual(blocked.status_code, 400)
        self.assertEqual(verify.status_code, 200)
        self.assertIn('new@b.com', verify.text)
        self.assertEqual(login.status_code, 200)
        self.assertIn('token', login.json())

    def test_verify_unknown_token(self):
        self.assertEqual(self.client.get('/api/users/verify/nope').status_code, 401)

    def test_register_password_over_bcrypt_limit(self):
        response = self.register(password='x' * 100)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.repo.store, {})

    def test_resend_verification_after_failed_email(self):
        self.notifier.fail = True
        self.assertEqual(self.register().status_code, 500)
        self.notifier.fail = False

        response = self.client.post('/api/users/verify', json={'email': 'new@b.com'})

        self.assertEqual(response.status_code, 200)
        token = self.repo.get_by_email('new@b.com').verification_token
        self.assertIn(f'/api/users/verify/{token}', self.notifier.last_to('new@b.com').html)
        self.assertEqual(self.client.get(f'/api/users/verify/{token}').status_code, 200)

    def test_resend_verification_unknown_email(self):
        response = self.client.post('/api/users/verify', json={'email': 'nobody@b.com'})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.notifier.sent, [])

    def test_resend_verification_already_verified(self):
        user_id = self.register().json()['id']
        self.client.get(f'/api/users/verify/{self.repo.get_by_id(user_id).verification_token}')

        response = self.client.post('/api/users/verify', json={'email': 'new@b.com'})

        self.assertEqual(response.status_code, 400)


if __name__ == '__main__':
    unittest.main()
