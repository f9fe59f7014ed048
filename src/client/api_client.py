"""HTTP client for the bookshelf auth API."""

import logging
from typing import Any

import httpx

from client.login_form import LoginForm

logger = logging.getLogger(__name__)

API_TIMEOUT_SECONDS = 10.0
TOKEN_HEADER = "x-auth-token"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: Any):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class ApiClient:
    """Thin wrapper over httpx that keeps the session token after login."""

    def __init__(self, base_url: str, client: httpx.Client | None = None):
        self._client = client or httpx.Client(base_url=base_url, timeout=API_TIMEOUT_SECONDS)
        self.token: str | None = None

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers[TOKEN_HEADER] = self.token
        response = self._client.request(method, path, headers=headers, **kwargs)
        if response.is_error:
            raise ApiError(response.status_code, _error_detail(response))
        return response

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def register(self, name: str, email: str, password: str) -> dict:
        response = self._request(
            "POST", "/api/users", json={"name": name, "email": email, "password": password},
        )
        return response.json()

    def login(self, form: LoginForm) -> str:
        """Log in with the form values and keep the returned token."""
        response = self._request(
            "POST", "/api/auth", json={"email": form.email, "password": form.password},
        )
        self.token = response.json()["token"]
        logger.debug("Logged in", extra={"email": form.email})
        return self.token

    def logout(self) -> None:
        self.token = None

    def load_user(self) -> dict:
        return self._request("GET", "/api/auth").json()

    def recover(self, email: str) -> str:
        return self._request("POST", "/api/auth/recover", json={"email": email}).text

    def check_reset_token(self, token: str) -> bool:
        """True if the reset token is still usable, False on 401."""
        try:
            self._request("GET", f"/api/auth/reset/{token}")
        except ApiError as e:
            if e.status_code == 401:
                return False
            raise
        return True

    def reset_password(self, token: str, password: str) -> str:
        return self._request(
            "POST", f"/api/auth/reset/{token}", json={"password": password},
        ).text


def _error_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return body.get("detail", body.get("errors", body))
    return body
