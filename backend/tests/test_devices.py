"""Tests for device registration and the role-gated device endpoints."""
import uuid

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.dialects import postgresql

from app.core.security import create_access_token
from app.main import app
from app.models.device import Platform
from app.services.devices import build_device_upsert

from helpers import FakeDevice, FakeUser, make_mock_session, override_dependencies


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


DEVICE_BODY = {
    "deviceId": "device-1",
    "platform": "ANDROID",
    "model": "Pixel 8",
    "osVersion": "14",
    "appVersion": "1.2.0",
}


# ─── Upsert statement ─────────────────────────────────────────────────────────

def _compile(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_device_upsert_is_single_insert_on_conflict_statement():
    sql = _compile(
        build_device_upsert(
            device_id="device-1",
            platform=Platform.IOS,
            model="iPhone 15",
            os_version="17.4",
            app_version="1.2.0",
        )
    )

    assert sql.startswith("INSERT INTO devices")
    assert "ON CONFLICT (device_id) DO UPDATE SET" in sql
    for column in ("platform", "model", "os_version", "app_version", "updated_at"):
        assert f"{column} = " in sql
    assert "RETURNING" in sql


def test_device_upsert_keeps_existing_owner_for_anonymous_caller():
    sql = _compile(
        build_device_upsert(
            device_id="device-1",
            platform=Platform.ANDROID,
            model="Pixel 8",
            os_version="14",
            app_version="1.2.0",
        )
    )
    assert "user_id = coalesce(excluded.user_id, devices.user_id)" in sql


def test_device_upsert_rejects_unknown_platform():
    with pytest.raises(ValueError):
        build_device_upsert(
            device_id="device-1",
            platform="WINDOWS",
            model="Surface",
            os_version="11",
            app_version="1.0.0",
        )


# ─── POST /auth/device/register ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_register_device_anonymous_returns_device_id():
    device = FakeDevice(device_id="device-1")
    mock_session = make_mock_session(scalar=device)
    recorder = override_dependencies(mock_session)
    try:
        async with _client() as client:
            response = await client.post("/api/v1/auth/device/register", json=DEVICE_BODY)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["deviceId"] == "device-1"
    assert body["data"]["registeredAt"]
    mock_session.execute.assert_awaited_once()
    mock_session.commit.assert_awaited_once()
    assert recorder.actions() == ["DEVICE_REGISTERED"]
    assert recorder.entries[0][0] is None


@pytest.mark.asyncio
async def test_register_device_twice_issues_one_upsert_per_call():
    """Re-registration goes through the same ON CONFLICT statement, never a second plain insert."""
    mock_session = make_mock_session(scalar=FakeDevice(model="Pixel 9"))
    override_dependencies(mock_session)
    try:
        async with _client() as client:
            await client.post("/api/v1/auth/device/register", json=DEVICE_BODY)
            second = await client.post("/api/v1/auth/device/register", json={**DEVICE_BODY, "model": "Pixel 9"})
    finally:
        app.dependency_overrides.clear()

    assert second.status_code == 200
    statements = [call.args[0] for call in mock_session.execute.await_args_list]
    assert len(statements) == 2
    for stmt in statements:
        assert "ON CONFLICT (device_id) DO UPDATE" in _compile(stmt)
    assert statements[1].compile(dialect=postgresql.dialect()).params["model"] == "Pixel 9"


@pytest.mark.asyncio
async def test_register_device_with_token_binds_owner():
    user_id = uuid.uuid4()
    token = create_access_token(str(user_id), "field", "FIELD")
    mock_session = make_mock_session(scalar=FakeDevice(user_id=user_id))
    recorder = override_dependencies(mock_session)
    try:
        async with _client() as client:
            response = await client.post(
                "/api/v1/auth/device/register",
                json=DEVICE_BODY,
                headers={"Authorization": f"Bearer {token}"},
            )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    stmt = mock_session.execute.await_args.args[0]
    assert stmt.compile(dialect=postgresql.dialect()).params["user_id"] == user_id
    assert recorder.entries[0][0] == user_id


@pytest.mark.asyncio
async def test_register_device_invalid_platform_fails_validation():
    mock_session = make_mock_session()
    override_dependencies(mock_session)
    try:
        async with _client() as client:
            response = await client.post(
                "/api/v1/auth/device/register", json={**DEVICE_BODY, "platform": "WINDOWS"}
            )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["deviceId", "model", "osVersion", "appVersion"])
async def test_register_device_blank_fields_fail_validation(field):
    override_dependencies(make_mock_session())
    try:
        async with _client() as client:
            response = await client.post("/api/v1/auth/device/register", json={**DEVICE_BODY, field: "  "})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# ─── Role-gated device listings ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_field_only_route_rejects_admin_token():
    token = create_access_token(str(uuid.uuid4()), "admin", "ADMIN")
    mock_session = make_mock_session()
    override_dependencies(mock_session)
    try:
        async with _client() as client:
            response = await client.get("/api/v1/mobile/devices", headers={"Authorization": f"Bearer {token}"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 403
    body = response.json()
    assert body["error"]["code"] == "FORBIDDEN"
    assert body["error"]["details"]["userRole"] == "ADMIN"
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_field_only_route_lists_callers_devices():
    user_id = uuid.uuid4()
    token = create_access_token(str(user_id), "field", "FIELD")
    override_dependencies(make_mock_session(scalars=[FakeDevice(user_id=user_id)]))
    try:
        async with _client() as client:
            response = await client.get("/api/v1/mobile/devices", headers={"Authorization": f"Bearer {token}"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["deviceId"] == "device-1"
    assert data[0]["userId"] == str(user_id)


@pytest.mark.asyncio
async def test_user_devices_requires_admin_or_backend():
    target = uuid.uuid4()
    field_token = create_access_token(str(uuid.uuid4()), "field", "FIELD")
    backend_token = create_access_token(str(uuid.uuid4()), "backend", "BACKEND")
    override_dependencies(make_mock_session(scalars=[FakeDevice(user_id=target)]))
    try:
        async with _client() as client:
            denied = await client.get(
                f"/api/v1/devices/user/{target}", headers={"Authorization": f"Bearer {field_token}"}
            )
            allowed = await client.get(
                f"/api/v1/devices/user/{target}", headers={"Authorization": f"Bearer {backend_token}"}
            )
    finally:
        app.dependency_overrides.clear()

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["data"][0]["platform"] == "ANDROID"


@pytest.mark.asyncio
async def test_protected_route_without_token_never_reaches_handler():
    mock_session = make_mock_session()
    override_dependencies(mock_session)
    try:
        async with _client() as client:
            response = await client.get(f"/api/v1/devices/user/{uuid.uuid4()}")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"
    mock_session.execute.assert_not_called()


# ─── End-to-end: seeded admin ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_seeded_admin_logs_in_and_is_refused_by_field_route():
    admin = FakeUser(username="admin", password="admin123", role="ADMIN")
    override_dependencies(make_mock_session(scalar=admin))
    try:
        async with _client() as client:
            login = await client.post("/api/v1/auth/login", json={"username": "admin", "password": "admin123"})
            token = login.json()["data"]["tokens"]["accessToken"]
            field_route = await client.get("/api/v1/mobile/devices", headers={"Authorization": f"Bearer {token}"})
    finally:
        app.dependency_overrides.clear()

    assert login.status_code == 200
    assert login.json()["data"]["user"]["role"] == "ADMIN"
    assert field_route.status_code == 403
    assert field_route.json()["error"]["code"] == "FORBIDDEN"
