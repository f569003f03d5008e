"""
Feature tests for the session lifecycle after a login: refresh-token
rotation and logout.
"""

import pytest

from tests.feature.auth.helpers import bearer, login, refresh, refresh_cookie


class TestRefreshRotation:
    @pytest.mark.asyncio
    async def test_refresh_issues_new_pair_and_retires_the_old_cookie(self, client):
        # Arrange
        session = await login(client, "google")
        old_raw = refresh_cookie(session)

        # Act
        rotated = await refresh(client, old_raw)

        # Assert
        assert rotated.status_code == 200, rotated.text
        new_raw = refresh_cookie(rotated)
        assert new_raw and new_raw != old_raw
        assert rotated.json()["user"]["id"] == session.json()["user"]["id"]
        assert rotated.json()["token"] != session.json()["token"]

        replay = await refresh(client, old_raw)
        assert replay.status_code == 401
        assert replay.json()["code"] == "invalid_refresh_token"

    @pytest.mark.asyncio
    async def test_rotated_cookie_keeps_working(self, client):
        session = await login(client, "google")
        first = await refresh(client, refresh_cookie(session))

        second = await refresh(client, refresh_cookie(first))

        assert second.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_cookie_is_unauthorized(self, client):
        response = await refresh(client, None)

        assert response.status_code == 401
        assert response.json()["detail"] == "Refresh token cookie is missing"

    @pytest.mark.asyncio
    async def test_forged_cookie_is_unauthorized(self, client):
        response = await refresh(client, "forged-value")
        assert response.status_code == 401


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_revokes_access_token_and_every_refresh_token(self, client):
        """Test that logout ends all sessions of the account, not only the current one."""
        # Arrange
        first = await login(client, "google")
        second = await login(client, "google")
        token = first.json()["token"]

        # Act
        response = await client.post("/api/v1/auth/logout", headers=bearer(token))

        # Assert
        assert response.status_code == 200, response.text
        assert response.json()["message"] == "Logged out successfully"
        assert "refresh_token=" in response.headers["set-cookie"]

        again = await client.post("/api/v1/auth/logout", headers=bearer(token))
        assert again.status_code == 401
        assert again.json()["detail"] == "Token has been revoked"

        for session in (first, second):
            assert (await refresh(client, refresh_cookie(session))).status_code == 401

    @pytest.mark.asyncio
    async def test_other_access_tokens_stay_valid_until_expiry(self, client):
        first = await login(client, "google")
        second = await login(client, "google")

        await client.post("/api/v1/auth/logout", headers=bearer(first.json()["token"]))
        response = await client.post("/api/v1/auth/logout", headers=bearer(second.json()["token"]))

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_logout_without_token_is_unauthorized(self, client):
        response = await client.post("/api/v1/auth/logout")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["detail"] == "Not authenticated"

    @pytest.mark.asyncio
    async def test_logout_with_garbage_token_is_unauthorized(self, client):
        response = await client.post("/api/v1/auth/logout", headers=bearer("not-a-jwt"))
        assert response.status_code == 401
