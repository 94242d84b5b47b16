"""Unit tests for token handling and actor resolution."""

import uuid
from datetime import timedelta

import pytest

from forum_trust.exceptions import AuthorizationError, NotFoundError
from forum_trust.kernel.identity.actor import resolve_actor
from forum_trust.kernel.identity.jwt import JWTManager
from forum_trust.kernel.models.user import Role


class TestJWT:
    def test_round_trip(self, jwt_manager):
        user_id = uuid.uuid4()

        token, expires, jti = jwt_manager.create_access_token(user_id, "moderator")
        payload = jwt_manager.verify_access_token(token)

        assert payload.sub == str(user_id)
        assert payload.role == "moderator"
        assert payload.jti == jti
        assert payload.exp <= expires

    def test_expired_token(self, jwt_manager):
        token, _, _ = jwt_manager.create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-1))
        assert jwt_manager.verify_access_token(token) is None

    def test_wrong_secret(self, jwt_manager):
        token, _, _ = jwt_manager.create_access_token(uuid.uuid4())
        other = JWTManager(secret_key="another-secret-key-for-testing-only", algorithm="HS256")
        assert other.verify_access_token(token) is None


class TestResolveActor:
    async def test_uses_stored_role(self, store, make_user):
        created = await make_user("super_moderator")

        actor = await resolve_actor(store, str(created.id))

        assert actor.role == Role.SUPER_MODERATOR
        assert actor.id == created.id

    async def test_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            await resolve_actor(store, uuid.uuid4())

    async def test_disabled_user(self, store, make_user):
        created = await make_user("moderator", is_active=False)
        with pytest.raises(AuthorizationError):
            await resolve_actor(store, created.id)
