"""Unit tests for API dependencies: repository and notifier wiring."""

import unittest
from unittest.mock import patch, MagicMock

from fastapi import HTTPException

from adapter.email.resend import ResendNotifier
from adapter.mongodb.user_repository import MongoUserRepository
from api.dependencies import DATABASE_NAME, get_notifier, get_user_repo


class TestGetUserRepo(unittest.TestCase):

    @patch('api.dependencies.get_mongodb_client')
    def test_returns_mongo_repository_when_connected(self, mock_get_client):
        mock_client = MagicMock()
        mock_client.__getitem__.return_value = MagicMock()
        mock_get_client.return_value = mock_client

        repo = get_user_repo()

        self.assertIsInstance(repo, MongoUserRepository)
        mock_client.__getitem__.assert_called_with(DATABASE_NAME)

    @patch('api.dependencies.get_mongodb_client')
    def test_raises_503_when_mongodb_unavailable(self, mock_get_client):
        mock_get_client.return_value = None

        with self.assertRaises(HTTPException) as context:
            get_user_repo()

        self.assertEqual(context.exception.status_code, 503)
        self.assertEqual(context.exception.detail, "Database unavailable")


class TestGetNotifier(unittest.TestCase):

    def test_returns_resend_notifier(self):
        self.assertIsInstance(get_notifier(), ResendNotifier)


if __name__ == '__main__':
    unittest.main()
