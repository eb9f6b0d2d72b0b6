import asyncio
import aiohttp
import pytest
from unittest.mock import MagicMock
from server_inventory.client import ApiClient
from server_inventory.controller import EditSurface, RecordController, SurfaceState
from server_inventory.exceptions import (
    ApiError,
    AuthenticationError,
    NotAuthenticatedError,
    RecordValidationError,
)
from server_inventory.schemas import ServerFields
from server_inventory.session import SessionStore
from constants import API_URL, SERVER_FIELDS, SERVER_ID, TOKEN, USER


@pytest.fixture
def patch_session(monkeypatch, mock_client_session):
    """Install a mocked aiohttp.ClientSession yielding the given responses."""

    def _patch(*responses):
        _session = mock_client_session(*responses)
        monkeypatch.setattr("aiohttp.ClientSession", MagicMock(return_value=_session))
        return _session

    return _patch


@pytest.mark.asyncio
async def test_login_does_not_send_bearer(session_file, patch_session, mock_response):
    """Login is unauthenticated and returns token + user."""
    _session = patch_session(mock_response(payload={"token": TOKEN, "user": USER}))
    client = ApiClient(API_URL + "/", SessionStore(session_file))

    response = await client.login("alice", "x")

    assert response.token == TOKEN
    assert response.user.username == "alice"
    method, url = _session.request.call_args[0]
    assert (method, url) == ("POST", f"{API_URL}/api/auth/login")
    assert _session.request.call_args[1]["json"] == {"username": "alice", "password": "x"}
    assert _session.request.call_args[1]["headers"] == {}


@pytest.mark.asyncio
async def test_login_bad_credentials(session_file, patch_session, mock_response):
    """401 from login surfaces the API's error message."""
    patch_session(mock_response(status=401, payload={"error": "Invalid credentials"}))
    client = ApiClient(API_URL, SessionStore(session_file))

    with pytest.raises(AuthenticationError) as exc_info:
        await client.login("alice", "wrong")

    assert exc_info.value.status == 401
    assert exc_info.value.message == "Invalid credentials"


@pytest.mark.asyncio
async def test_register_validates_before_sending(session_file, patch_session):
    """Short passwords and malformed emails never reach the API."""
    _session = patch_session()
    client = ApiClient(API_URL, SessionStore(session_file))

    with pytest.raises(RecordValidationError) as exc_info:
        await client.register("alice", "not-an-email", "12345")

    assert any(error.startswith("email") for error in exc_info.value.errors)
    assert any(error.startswith("password") for error in exc_info.value.errors)
    _session.request.assert_not_called()


@pytest.mark.asyncio
async def test_list_attaches_bearer(session_store, patch_session, mock_response, server_payload):
    """Protected calls carry the stored token."""
    _session = patch_session(mock_response(payload={"servers": [server_payload], "total": 1}))
    client = ApiClient(API_URL, session_store)

    records = await client.list_servers()

    assert [record.id for record in records] == [SERVER_ID]
    assert records[0].cpu == 4
    assert _session.request.call_args[1]["headers"] == {"Authorization": f"Bearer {TOKEN}"}
    assert _session.request.call_args[0] == ("GET", f"{API_URL}/api/servers")


@pytest.mark.asyncio
async def test_list_null_servers_is_empty(session_store, patch_session, mock_response):
    """A null server list is an empty inventory, not an error."""
    patch_session(mock_response(payload={"servers": None, "total": 0}))
    assert await ApiClient(API_URL, session_store).list_servers() == []


@pytest.mark.asyncio
async def test_protected_call_without_session(session_file, patch_session):
    """No token means no request at all."""
    _session = patch_session()
    with pytest.raises(NotAuthenticatedError):
        await ApiClient(API_URL, SessionStore(session_file)).list_servers()
    _session.request.assert_not_called()


@pytest.mark.asyncio
async def test_update_sends_full_record(
    session_store, patch_session, mock_response, server_payload
):
    """PUT carries every writable field, not a partial patch."""
    _session = patch_session(mock_response(payload=server_payload))
    fields = ServerFields.model_validate(SERVER_FIELDS)

    record = await ApiClient(API_URL, session_store).update_server(SERVER_ID, fields)

    assert record.id == SERVER_ID
    assert _session.request.call_args[0] == ("PUT", f"{API_URL}/api/servers/{SERVER_ID}")
    sent = _session.request.call_args[1]["json"]
    assert set(sent) == set(ServerFields.model_fields)
    assert sent["environment"] == "Production"


@pytest.mark.asyncio
async def test_delete_not_found(session_store, patch_session, mock_response):
    """Error statuses become ApiError with the API's message."""
    patch_session(mock_response(status=404, payload={"error": "Server not found"}))

    with pytest.raises(ApiError) as exc_info:
        await ApiClient(API_URL, session_store).delete_server(SERVER_ID)

    assert exc_info.value.status == 404
    assert str(exc_info.value) == "Server not found (HTTP 404)"


@pytest.mark.asyncio
async def test_error_without_json_body(session_store, patch_session, mock_response):
    """Plain-text error bodies are used verbatim."""
    patch_session(mock_response(status=502, payload=None, text="Bad Gateway\n"))

    with pytest.raises(ApiError) as exc_info:
        await ApiClient(API_URL, session_store).get_server(SERVER_ID)

    assert exc_info.value.message == "Bad Gateway"


@pytest.mark.asyncio
async def test_network_failure(session_store, patch_session):
    """Transport errors are wrapped with no status."""
    patch_session(aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(ApiError) as exc_info:
        await ApiClient(API_URL, session_store).list_servers()

    assert exc_info.value.status is None


@pytest.mark.asyncio
async def test_unexpected_payload(session_store, patch_session, mock_response):
    """A response that does not look like a record is an ApiError, not a crash."""
    patch_session(mock_response(payload={"unexpected": True}))

    with pytest.raises(ApiError):
        await ApiClient(API_URL, session_store).get_server(SERVER_ID)


@pytest.mark.asyncio
async def test_timeout_is_wrapped(session_store, patch_session):
    """aiohttp's total timeout is a bare TimeoutError; it becomes an ApiError too."""
    patch_session(asyncio.TimeoutError())

    with pytest.raises(ApiError) as exc_info:
        await ApiClient(API_URL, session_store).list_servers()

    assert exc_info.value.status is None
    assert "TimeoutError" in exc_info.value.message


@pytest.mark.asyncio
async def test_timeout_keeps_stale_list(session_store, patch_session, server_record):
    """A timed-out refresh leaves the previous list in place and raises a notice."""
    patch_session(asyncio.TimeoutError())
    controller = RecordController(ApiClient(API_URL, session_store))
    controller.records = [server_record]

    assert await controller.list() == [server_record]
    assert controller.notices.items[-1].level == "error"


@pytest.mark.asyncio
async def test_timeout_reopens_edit_surface(session_store, patch_session, server_record):
    """A timed-out update puts the edit surface back to open with the draft intact."""
    patch_session(asyncio.TimeoutError())
    surface = EditSurface(RecordController(ApiClient(API_URL, session_store)))
    surface.open_edit(server_record)
    surface.set_field("cpu", "32")

    assert await surface.submit() is None
    assert surface.state is SurfaceState.OPEN
    assert surface.draft["cpu"] == 32
