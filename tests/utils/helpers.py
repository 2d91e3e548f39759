from typing import Any

import httpx


def create_auth_headers(token: str) -> dict[str, str]:
    """Create Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {token}"}


def auth_cookies(token: str) -> dict[str, str]:
    return {"access_token": token}


def assert_error_response(
    response: httpx.Response, status_code: int, code: str | None = None
) -> dict[str, Any]:
    """Assert the standard error envelope and return its ``error`` object."""
    assert response.status_code == status_code, response.text
    data = response.json()
    assert data["success"] is False
    if code is not None:
        assert data["error"]["code"] == code
    error: dict[str, Any] = data["error"]
    return error


def assert_user_projection(data: dict[str, Any]) -> None:
    assert "id" in data
    assert "name" in data
    assert "image" in data
    assert "githubUsername" in data
