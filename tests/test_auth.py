"""Tests for bearer-token authentication.

Authentication order:
1. dev-token bypass (dev_mode only)
2. Firebase ID token
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import select

from scrapbook_api.api import deps
from scrapbook_api.models import User


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestDevMode:
    @pytest.mark.asyncio
    async def test_dev_token_resolves_dev_user(self, db, monkeypatch):
        monkeypatch.setattr(deps.settings, "dev_mode", True)

        user = await deps.authenticate_user(db, _bearer(deps.DEV_TOKEN))

        assert user.firebase_uid == deps.settings.dev_user_id
        assert user.email == deps.settings.dev_user_email

    @pytest.mark.asyncio
    async def test_dev_user_created_once(self, db, monkeypatch):
        monkeypatch.setattr(deps.settings, "dev_mode", True)

        first = await deps.authenticate_user(db, None)
        second = await deps.authenticate_user(db, _bearer(deps.DEV_TOKEN))

        assert first.id == second.id

    @pytest.mark.asyncio
    async def test_dev_token_ignored_outside_dev_mode(self, db, monkeypatch):
        monkeypatch.setattr(deps.settings, "dev_mode", False)

        with patch.object(deps, "get_firebase_app"), patch.object(
            deps.firebase_auth, "verify_id_token", side_effect=ValueError("malformed token")
        ):
            with pytest.raises(HTTPException) as exc_info:
                await deps.authenticate_user(db, _bearer(deps.DEV_TOKEN))

        assert exc_info.value.status_code == 401


class TestFirebaseToken:
    @pytest.mark.asyncio
    async def test_missing_credentials(self, db, monkeypatch):
        monkeypatch.setattr(deps.settings, "dev_mode", False)

        with pytest.raises(HTTPException) as exc_info:
            await deps.authenticate_user(db, None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Authentication required"

    @pytest.mark.asyncio
    async def test_valid_token_creates_user(self, db, monkeypatch):
        monkeypatch.setattr(deps.settings, "dev_mode", False)
        decoded = {"uid": "firebase-uid-42", "email": "maya@example.com"}

        with patch.object(deps, "get_firebase_app", return_value=MagicMock()), patch.object(
            deps.firebase_auth, "verify_id_token", return_value=decoded
        ) as verify:
            user = await deps.authenticate_user(db, _bearer("id-token"))

        verify.assert_called_once_with("id-token")
        assert user.firebase_uid == "firebase-uid-42"
        assert user.name == "maya"

        result = await db.execute(select(User).where(User.firebase_uid == "firebase-uid-42"))
        assert result.scalar_one().id == user.id

    @pytest.mark.asyncio
    async def test_existing_user_is_reused(self, db, users, monkeypatch):
        monkeypatch.setattr(deps.settings, "dev_mode", False)
        owner, _ = users

        with patch.object(deps, "get_firebase_app"), patch.object(
            deps.firebase_auth, "verify_id_token", return_value={"uid": "uid-owner"}
        ):
            user = await deps.authenticate_user(db, _bearer("id-token"))

        assert user.id == owner.id

    @pytest.mark.asyncio
    async def test_rejected_token(self, db, monkeypatch):
        monkeypatch.setattr(deps.settings, "dev_mode", False)

        with patch.object(deps, "get_firebase_app"), patch.object(
            deps.firebase_auth, "verify_id_token", side_effect=ValueError("Token expired")
        ):
            with pytest.raises(HTTPException) as exc_info:
                await deps.authenticate_user(db, _bearer("stale"))

        assert exc_info.value.status_code == 401
        assert "Token expired" in exc_info.value.detail
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
