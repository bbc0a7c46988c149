"""Tests for the store, auth, session cache and logo storage clients."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from botocore.exceptions import ClientError

from src.aws import LogoStorage, LogoUploadError
from src.clients import (
    AuthClient,
    AuthUser,
    InvalidCredentialsError,
    NotAuthenticatedError,
    OwnerSession,
    RedisSessionStore,
    StoreAuthenticationError,
    StoreClient,
    StoreClientError,
    StoreConflictError,
    StoreNotFoundError,
    StoreQuery,
    StoreServerError,
)


def store_with(handler) -> StoreClient:
    return StoreClient(transport=httpx.MockTransport(handler))


class TestStoreQuery:
    """Tests for StoreQuery parameter building."""

    def test_params(self):
        query = (
            StoreQuery("bookings")
            .in_("room_type_id", ["rt1", "rt2"])
            .gte("created_at", "2025-01-01")
            .not_null("guest_id")
            .order("created_at")
            .limit(3)
        )

        assert query.params == [
            ("select", "*"),
            ("room_type_id", 'in.("rt1","rt2")'),
            ("created_at", "gte.2025-01-01"),
            ("guest_id", "not.is.null"),
            ("order", "created_at.desc"),
            ("limit", "3"),
        ]
        assert query.filters() == query.params[1:4]

    def test_upper_bound(self):
        query = StoreQuery("manual_finances").gte("date", "2024-01-01").lt("date", "2025-01-01")

        assert query.filters() == [("date", "gte.2024-01-01"), ("date", "lt.2025-01-01")]


class TestStoreClient:
    """Tests for StoreClient."""

    @pytest.mark.asyncio
    async def test_select_sends_filters_and_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=[{"id": "h1"}])

        rows = await store_with(handler).select(StoreQuery("hotels").eq("owner_id", "owner-1"), "token-1")

        request = seen["request"]
        assert rows == [{"id": "h1"}]
        assert request.url.path.endswith("/rest/v1/hotels")
        assert request.url.params["owner_id"] == "eq.owner-1"
        assert request.headers["Authorization"] == "Bearer token-1"

    @pytest.mark.asyncio
    async def test_upsert_uses_on_conflict(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(201, json=json.loads(request.content))

        rows = await store_with(handler).insert(
            "owner_kyc", [{"user_id": "owner-1"}], "token-1", on_conflict="user_id"
        )

        assert rows == [{"user_id": "owner-1"}]
        assert seen["request"].url.params["on_conflict"] == "user_id"
        assert "resolution=merge-duplicates" in seen["request"].headers["Prefer"]

    @pytest.mark.asyncio
    async def test_unfiltered_writes_are_refused(self):
        client = store_with(lambda request: httpx.Response(200, json=[]))

        with pytest.raises(StoreClientError):
            await client.update(StoreQuery("guests"), {"status": "vip"}, "token-1")
        with pytest.raises(StoreClientError):
            await client.delete(StoreQuery("guests"), "token-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,body,error",
        [
            (401, {"message": "JWT expired"}, StoreAuthenticationError),
            (403, {"message": "permission denied"}, StoreAuthenticationError),
            (404, {"message": "relation does not exist"}, StoreNotFoundError),
            (409, {"code": "23505", "message": "duplicate key"}, StoreConflictError),
            (400, {"code": "23505", "message": "duplicate key"}, StoreConflictError),
            (400, {"code": "PGRST100", "message": "bad filter"}, StoreClientError),
            (503, {"message": "unavailable"}, StoreServerError),
        ],
    )
    async def test_status_mapping(self, status_code, body, error):
        client = store_with(lambda request: httpx.Response(status_code, json=body))

        with pytest.raises(error):
            await client.select(StoreQuery("guests"), "token-1")

    @pytest.mark.asyncio
    async def test_conflict_keeps_postgres_code(self):
        client = store_with(
            lambda request: httpx.Response(409, json={"code": "23505", "message": "duplicate key"})
        )

        with pytest.raises(StoreConflictError) as exc:
            await client.insert("guests", [{"email": "asha@example.com"}], "token-1")

        assert exc.value.code == "23505"

    @pytest.mark.asyncio
    async def test_no_retry_by_default(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, text="boom")

        with pytest.raises(StoreServerError):
            await store_with(handler).select(StoreQuery("guests"), "token-1")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retries_server_errors_when_configured(self):
        responses = [httpx.Response(502, text="bad gateway"), httpx.Response(200, json=[{"id": "g1"}])]
        client = store_with(lambda request: responses.pop(0))
        client.max_attempts = 2

        with patch("src.clients.store_client.asyncio.sleep", new=AsyncMock()) as sleep:
            rows = await client.select(StoreQuery("guests"), "token-1")

        assert rows == [{"id": "g1"}]
        sleep.assert_awaited_once_with(1)


class TestAuthClient:
    """Tests for AuthClient."""

    @pytest.mark.asyncio
    async def test_sign_in(self):
        def handler(request):
            assert request.url.params["grant_type"] == "password"
            assert json.loads(request.content) == {"email": "owner@example.com", "password": "secret123"}
            return httpx.Response(
                200,
                json={
                    "access_token": "token-1",
                    "refresh_token": "refresh-1",
                    "expires_in": 3600,
                    "user": {"id": "owner-1", "email": "owner@example.com"},
                },
            )

        session = await AuthClient(transport=httpx.MockTransport(handler)).sign_in_with_password(
            "owner@example.com", "secret123"
        )

        assert session.access_token == "token-1"
        assert session.user.id == "owner-1"
        assert not session.is_expired

    @pytest.mark.asyncio
    async def test_sign_in_refused_carries_service_message(self):
        client = AuthClient(
            transport=httpx.MockTransport(
                lambda request: httpx.Response(
                    400,
                    json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
                )
            )
        )

        with pytest.raises(InvalidCredentialsError, match="Invalid login credentials"):
            await client.sign_in_with_password("owner@example.com", "wrongpass")

    @pytest.mark.asyncio
    async def test_get_user_without_token(self):
        with pytest.raises(NotAuthenticatedError):
            await AuthClient().get_user(None)

    @pytest.mark.asyncio
    async def test_get_user_rejected_token(self):
        client = AuthClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))
        )

        with pytest.raises(NotAuthenticatedError):
            await client.get_user("expired-token")

    @pytest.mark.asyncio
    async def test_get_user(self):
        def handler(request):
            assert request.headers["Authorization"] == "Bearer token-1"
            return httpx.Response(200, json={"id": "owner-1", "email": "owner@example.com", "role": "authenticated"})

        user = await AuthClient(transport=httpx.MockTransport(handler)).get_user("token-1")

        assert user == AuthUser(id="owner-1", email="owner@example.com")


class TestRedisSessionStore:
    """Tests for RedisSessionStore."""

    def make_session(self, expires_in: timedelta) -> OwnerSession:
        return OwnerSession(
            access_token="token-1",
            expires_at=datetime.now(timezone.utc) + expires_in,
            user=AuthUser(id="owner-1"),
        )

    @pytest.mark.asyncio
    async def test_save_sets_ttl_below_token_lifetime(self):
        redis_client = AsyncMock()
        store = RedisSessionStore(redis_client)

        await store.save(self.make_session(timedelta(hours=1)))

        key, ttl, payload = redis_client.setex.call_args.args
        assert key == "backoffice:owner:session"
        assert 3400 <= ttl < 3600
        assert OwnerSession.model_validate_json(payload).access_token == "token-1"

    @pytest.mark.asyncio
    async def test_load_round_trips(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = self.make_session(timedelta(hours=1)).model_dump_json()

        session = await RedisSessionStore(redis_client).load()

        assert session.user.id == "owner-1"

    @pytest.mark.asyncio
    async def test_expired_session_is_ignored(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = self.make_session(timedelta(minutes=-1)).model_dump_json()

        assert await RedisSessionStore(redis_client).load() is None

    @pytest.mark.asyncio
    async def test_redis_failure_is_tolerated(self):
        redis_client = AsyncMock()
        redis_client.get.side_effect = ConnectionError("connection refused")
        redis_client.setex.side_effect = ConnectionError("connection refused")
        store = RedisSessionStore(redis_client)

        assert await store.load() is None
        await store.save(self.make_session(timedelta(hours=1)))


class TestLogoStorage:
    """Tests for LogoStorage."""

    def test_upload_returns_public_url(self):
        s3_client = Mock()
        storage = LogoStorage(s3_client)

        url = storage.upload("owner-1", b"\x89PNG", "image/png")

        kwargs = s3_client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "business-logos"
        assert kwargs["Key"].startswith("owner-1/logo-")
        assert kwargs["Key"].endswith(".png")
        assert kwargs["ContentType"] == "image/png"
        assert url == storage.public_url(kwargs["Key"])
        assert storage.key_from_url(url) == kwargs["Key"]

    def test_foreign_url_has_no_key(self):
        storage = LogoStorage(Mock())

        assert storage.key_from_url("https://cdn.example.com/logo.png") is None
        assert storage.key_from_url(None) is None

    def test_upload_failure(self):
        s3_client = Mock()
        s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
        )

        with pytest.raises(LogoUploadError):
            LogoStorage(s3_client).upload("owner-1", b"\x89PNG", "image/png")
