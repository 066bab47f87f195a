"""
Tests for bearer token authentication and the reader profile.
"""
from datetime import timedelta

import pytest
from jose import jwt

from readrival.core.auth import create_access_token, decode_access_token
from readrival.core.exceptions import UnauthorizedException
from readrival.core.settings import settings
from readrival.core.supabase_client import supabase_client
from readrival.models.profile import Profile


class TestTokens:
    """Test token issue and validation."""

    def test_round_trip(self):
        """Issued tokens decode to the same subject."""
        token = create_access_token("user-x", email="x@example.com")

        payload = decode_access_token(token)

        assert payload["sub"] == "user-x"
        assert payload["email"] == "x@example.com"
        assert payload["aud"] == "authenticated"

    def test_expired_token(self):
        """Expired tokens are rejected."""
        token = create_access_token("user-x", expires_delta=timedelta(seconds=-10))

        with pytest.raises(UnauthorizedException):
            decode_access_token(token)

    def test_wrong_audience(self):
        """Tokens for another audience are rejected."""
        token = jwt.encode(
            {"sub": "user-x", "aud": "anon"},
            settings.SUPABASE_JWT_SECRET,
            algorithm=settings.ALGORITHM,
        )

        with pytest.raises(UnauthorizedException):
            decode_access_token(token)

    def test_wrong_secret(self):
        """Tokens signed with another secret are rejected."""
        token = jwt.encode(
            {"sub": "user-x", "aud": "authenticated"},
            "some-other-secret-with-at-least-32-chars",
            algorithm=settings.ALGORITHM,
        )

        with pytest.raises(UnauthorizedException):
            decode_access_token(token)


class TestAuthentication:
    """Test the authentication dependency through the API."""

    def test_missing_token(self, client, api_v1_prefix):
        """Requests without a bearer token are 401."""
        response = client.get(f"{api_v1_prefix}/profile/me")

        assert response.status_code == 401
        assert response.json()["errors"] == ["unauthenticated"]
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token(self, client, api_v1_prefix):
        """Garbage tokens are 401."""
        response = client.get(
            f"{api_v1_prefix}/profile/me",
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    def test_first_request_creates_profile(self, client, api_v1_prefix, db_session):
        """A valid token for an unknown user creates the profile."""
        token = create_access_token("brand-new", email="new@example.com")

        response = client.get(
            f"{api_v1_prefix}/profile/me",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["id"] == "brand-new"
        assert db_session.get(Profile, "brand-new").email == "new@example.com"

    def test_remote_verification(self, client, api_v1_prefix, db_session, monkeypatch):
        """Without a local secret the hosted auth service resolves the token."""
        monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", None)
        monkeypatch.setattr(supabase_client, "url", "https://project.supabase.co")
        monkeypatch.setattr(supabase_client, "key", "anon-key")
        monkeypatch.setattr(
            supabase_client,
            "get_user",
            lambda token: {"id": "remote-user", "email": "remote@example.com"}
            if token == "remote-token"
            else None,
        )

        response = client.get(
            f"{api_v1_prefix}/profile/me",
            headers={"Authorization": "Bearer remote-token"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["id"] == "remote-user"

        response = client.get(
            f"{api_v1_prefix}/profile/me",
            headers={"Authorization": "Bearer rejected"},
        )
        assert response.status_code == 401

    def test_auth_not_configured(self, client, api_v1_prefix, monkeypatch):
        """No secret and no hosted service is a 503."""
        monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", None)
        monkeypatch.setattr(supabase_client, "url", None)

        response = client.get(
            f"{api_v1_prefix}/profile/me",
            headers={"Authorization": "Bearer anything"},
        )

        assert response.status_code == 503


class TestProfile:
    """Test reading and updating the profile."""

    def test_read_profile(self, client, api_v1_prefix, auth_headers, test_user):
        """Counters and streaks are included."""
        response = client.get(f"{api_v1_prefix}/profile/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == test_user.username
        assert data["total_points"] == 0
        assert data["current_streak"] == 0
        assert data["favorite_genres"] == ["Fantasy"]

    def test_update_profile(self, client, api_v1_prefix, auth_headers):
        """Display fields and goals can be changed."""
        response = client.put(
            f"{api_v1_prefix}/profile/me",
            json={
                "display_name": "Violet",
                "favorite_genres": ["Romantasy"],
                "reading_goal_daily": 40,
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["display_name"] == "Violet"
        assert data["favorite_genres"] == ["Romantasy"]
        assert data["reading_goal_daily"] == 40

    def test_counters_not_writable(self, client, api_v1_prefix, auth_headers, db_session, test_user):
        """Cumulative counters ignore client input."""
        client.put(
            f"{api_v1_prefix}/profile/me",
            json={"total_points": 9999},
            headers=auth_headers,
        )

        db_session.refresh(test_user)
        assert test_user.total_points == 0

    def test_username_taken(self, client, api_v1_prefix, auth_headers, test_user_2):
        """Usernames are unique."""
        response = client.put(
            f"{api_v1_prefix}/profile/me",
            json={"username": test_user_2.username},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert response.json()["errors"] == ["username_taken"]


class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client):
        """The service reports healthy with the database reachable."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
