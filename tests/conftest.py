import sys
import pytest
from loguru import logger
from unittest.mock import AsyncMock, MagicMock
from server_inventory.schemas import ServerRecord
from server_inventory.session import SessionStore
from constants import SERVER_FIELDS, SERVER_ID, TOKEN, USER


@pytest.fixture
def mock_response():
    """Build a mock aiohttp response."""

    def _response(status=200, payload=None, text=""):
        resp = AsyncMock()
        resp.status = status
        resp.json = AsyncMock(return_value=payload)
        resp.text = AsyncMock(return_value=text)
        return resp

    return _response


@pytest.fixture
def mock_client_session():
    """Mock aiohttp ClientSession whose request() yields the given responses in order."""

    def _session_factory(*responses):
        mock_session = MagicMock()
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)

        request_cms = []
        for response in responses:
            if isinstance(response, Exception):
                request_cms.append(response)
                continue
            mock_request_cm = MagicMock()
            mock_request_cm.__aenter__ = AsyncMock(return_value=response)
            mock_request_cm.__aexit__ = AsyncMock(return_value=None)
            request_cms.append(mock_request_cm)
        mock_session.request = MagicMock(side_effect=request_cms)

        return mock_session

    return _session_factory


@pytest.fixture
def session_file(tmp_path):
    return str(tmp_path / "session.json")


@pytest.fixture
def session_store(session_file):
    """Session store with a logged-in user."""
    store = SessionStore(session_file)
    store.set_session(TOKEN, USER)
    return store


@pytest.fixture
def server_payload():
    return {
        "id": SERVER_ID,
        **SERVER_FIELDS,
        "delete_date": None,
        "created_at": "2026-10-01T09:30:00Z",
        "updated_at": "2026-10-02T11:00:00Z",
    }


@pytest.fixture
def server_record(server_payload):
    return ServerRecord.model_validate(server_payload)


@pytest.fixture
def mock_api_client():
    """ApiClient stand-in with every call as an AsyncMock."""
    client = MagicMock()
    client.list_servers = AsyncMock(return_value=[])
    client.get_server = AsyncMock()
    client.create_server = AsyncMock()
    client.update_server = AsyncMock()
    client.delete_server = AsyncMock(return_value={"message": "Server deleted successfully"})
    return client


@pytest.fixture(autouse=True)
def reset_logger():
    """The CLI callback reconfigures loguru; put the default sink back afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)
