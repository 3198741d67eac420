"""
Test suite for the HTTP and WebSocket API.

Runs the full application through TestClient with a container built from
offline settings: fake embeddings and chat model, memory vector store,
BM25 keyword index and a per-test SQLite database.

System role: Verification of API endpoints end to end
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from bookrag.api.deps import get_search_service
from bookrag.api.main import create_app
from bookrag.application.container import RagContainer
from bookrag.boundary.catalog import InMemoryBookCatalog
from bookrag.boundary.llm.chat_provider import FAKE_RESPONSE
from bookrag.configs.settings import Settings
from bookrag.core.exceptions import IndexUnavailable
from bookrag.core.generation.prompt_builder import NO_CONTEXT_MESSAGE
from bookrag.models.chunk import BookRecord, PageRecord
from bookrag.observability.middleware import CORRELATION_HEADER


@pytest.fixture
def catalog() -> InMemoryBookCatalog:
    catalog = InMemoryBookCatalog()
    catalog.add_book(
        BookRecord(book_id="moby", title="Moby Dick", category="fiction"),
        [
            PageRecord(book_id="moby", page_number=1, text="Call me Ishmael. Some years ago I went to sea."),
            PageRecord(book_id="moby", page_number=2, text="Queequeg carves his coffin from island wood."),
        ],
    )
    catalog.add_book(
        BookRecord(book_id="typee", title="Typee", category="travel"),
        [PageRecord(book_id="typee", page_number=1, text="Six months at sea in the valley of the Typees.")],
    )
    return catalog


@pytest.fixture
def client(test_settings: Settings, catalog: InMemoryBookCatalog):
    """TestClient over the full app; the lifespan runs for the whole test."""
    container = RagContainer.build(test_settings, catalog=catalog)
    with TestClient(create_app(container=container)) as client:
        yield client


def _ingest(client: TestClient, *book_ids: str) -> None:
    for book_id in book_ids:
        assert client.post(f"/api/v1/books/{book_id}/ingest").status_code == 200


def _open_conversation(client: TestClient, **fields) -> str:
    response = client.post("/api/v1/conversations", json={"user_id": "u1", **fields})
    assert response.status_code == 201
    return response.json()["id"]


def _receive_turn(websocket) -> list[dict]:
    """Collect events for one chat message up to the terminal event."""
    events = []
    while True:
        event = websocket.receive_json()
        events.append(event)
        if event["type"] in ("done", "error"):
            return events


class TestHealthEndpoint:
    """Test suite for GET /api/v1/health."""

    def test_health_should_report_closed_breakers(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "breakers": {"vector_store": "closed", "llm": "closed"}}

    def test_health_should_report_degraded_when_breaker_open(self, client: TestClient) -> None:
        # Arrange
        llm_breaker = client.app.state.container.breakers.get("llm")
        for _ in range(10):
            llm_breaker.record_failure()

        # Act
        body = client.get("/api/v1/health").json()

        # Assert
        assert body["status"] == "degraded"
        assert body["breakers"]["llm"] == "open"

    def test_response_should_echo_correlation_id(self, client: TestClient) -> None:
        response = client.get("/api/v1/health", headers={CORRELATION_HEADER: "req-42"})

        assert response.headers[CORRELATION_HEADER] == "req-42"

    def test_response_should_generate_correlation_id(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.headers[CORRELATION_HEADER]


class TestIngestionEndpoint:
    """Test suite for POST /api/v1/books/{book_id}/ingest."""

    def test_ingest_should_report_chunk_counts(self, client: TestClient) -> None:
        response = client.post("/api/v1/books/moby/ingest")

        assert response.status_code == 200
        assert response.json() == {"book_id": "moby", "chunk_count": 2, "pages_processed": 2, "skipped_pages": []}

    def test_ingest_should_return_404_for_unknown_book(self, client: TestClient) -> None:
        response = client.post("/api/v1/books/omoo/ingest")

        assert response.status_code == 404


class TestSearchEndpoint:
    """Test suite for POST /api/v1/search."""

    def test_search_should_answer_with_sources(self, client: TestClient) -> None:
        # Arrange
        _ingest(client, "moby", "typee")

        # Act
        response = client.post("/api/v1/search", json={"query": "coffin", "filters": {"book_id": "moby"}})

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == FAKE_RESPONSE
        assert body["degraded"] is False
        assert body["sources"]
        assert {source["book_id"] for source in body["sources"]} == {"moby"}
        assert 0.0 <= body["confidence"] <= 1.0

    def test_search_without_indexed_books_should_say_so(self, client: TestClient) -> None:
        response = client.post("/api/v1/search", json={"query": "coffin"})

        assert response.status_code == 200
        assert response.json()["answer"] == NO_CONTEXT_MESSAGE
        assert response.json()["sources"] == []

    def test_search_should_reject_blank_query(self, client: TestClient) -> None:
        response = client.post("/api/v1/search", json={"query": "   "})

        assert response.status_code == 422

    def test_search_should_reject_out_of_range_top_k(self, client: TestClient) -> None:
        response = client.post("/api/v1/search", json={"query": "whale", "top_k": 0})

        assert response.status_code == 422

    def test_search_failure_should_return_503(self, client: TestClient) -> None:
        # Arrange
        failing = MagicMock()
        failing.search = AsyncMock(side_effect=IndexUnavailable("both signals down", signal="keyword"))
        client.app.dependency_overrides[get_search_service] = lambda: failing

        # Act
        response = client.post("/api/v1/search", json={"query": "whale"})

        # Assert
        assert response.status_code == 503
        client.app.dependency_overrides.clear()


class TestConversationEndpoints:
    """Test suite for the /api/v1/conversations routes."""

    def test_create_conversation_should_return_header(self, client: TestClient) -> None:
        response = client.post("/api/v1/conversations", json={"user_id": "u1", "book_id": "moby", "title": "Whales"})

        assert response.status_code == 201
        body = response.json()
        assert body["book_id"] == "moby"
        assert body["conversation_type"] == "book_specific"
        assert body["status"] == "active"
        assert body["message_count"] == 0

    def test_messages_should_start_empty(self, client: TestClient) -> None:
        conversation_id = _open_conversation(client)

        response = client.get(f"/api/v1/conversations/{conversation_id}/messages")

        assert response.status_code == 200
        assert response.json() == {"messages": [], "total": 0}

    def test_messages_should_return_404_for_unknown_conversation(self, client: TestClient) -> None:
        response = client.get(f"/api/v1/conversations/{uuid.uuid4()}/messages")

        assert response.status_code == 404

    def test_archive_should_mark_conversation_archived(self, client: TestClient) -> None:
        conversation_id = _open_conversation(client)

        response = client.post(f"/api/v1/conversations/{conversation_id}/archive")

        assert response.status_code == 200
        assert response.json()["status"] == "archived"

    def test_archive_should_return_404_for_unknown_conversation(self, client: TestClient) -> None:
        response = client.post(f"/api/v1/conversations/{uuid.uuid4()}/archive")

        assert response.status_code == 404


class TestChatWebSocket:
    """Test suite for WS /ws/conversations/{id}/chat."""

    def test_chat_should_stream_content_then_done(self, client: TestClient) -> None:
        # Arrange
        _ingest(client, "moby")
        conversation_id = _open_conversation(client, book_id="moby")

        # Act
        with client.websocket_connect(f"/ws/conversations/{conversation_id}/chat") as websocket:
            websocket.send_json({"event": "chat", "data": {"message": "Who carves a coffin?"}})
            events = _receive_turn(websocket)
            # The next reply only comes once the turn, persistence included, has finished
            websocket.send_json({"event": "ping"})
            assert websocket.receive_json() == {"type": "pong"}

        # Assert
        assert [event["type"] for event in events[:-1]] == ["content"] * (len(events) - 1)
        assert "".join(event["text"] for event in events[:-1]) == FAKE_RESPONSE
        done = events[-1]
        assert done["type"] == "done"
        assert done["sources"]
        assert done["tokens_used"] > 0

        history = client.get(f"/api/v1/conversations/{conversation_id}/messages").json()
        assert [message["role"] for message in history["messages"]] == ["user", "assistant"]
        assert history["messages"][1]["content"] == FAKE_RESPONSE

    def test_ping_should_get_pong(self, client: TestClient) -> None:
        conversation_id = _open_conversation(client)

        with client.websocket_connect(f"/ws/conversations/{conversation_id}/chat") as websocket:
            websocket.send_json({"event": "ping"})

            assert websocket.receive_json() == {"type": "pong"}

    @pytest.mark.parametrize(
        ("payload", "expected"),
        [
            ("not json", "Invalid JSON format"),
            ('{"event": "dance"}', "Unknown event type: dance"),
            ('{"event": "chat", "data": {}}', "Message is required"),
        ],
    )
    def test_bad_client_events_should_get_error_and_keep_connection(
        self, client: TestClient, payload: str, expected: str
    ) -> None:
        conversation_id = _open_conversation(client)

        with client.websocket_connect(f"/ws/conversations/{conversation_id}/chat") as websocket:
            websocket.send_text(payload)
            assert websocket.receive_json() == {"type": "error", "message": expected}

            websocket.send_json({"event": "ping"})
            assert websocket.receive_json() == {"type": "pong"}

    def test_chat_on_unknown_conversation_should_get_error(self, client: TestClient) -> None:
        with client.websocket_connect(f"/ws/conversations/{uuid.uuid4()}/chat") as websocket:
            websocket.send_json({"event": "chat", "data": {"message": "Hello?"}})

            [event] = _receive_turn(websocket)

        assert event["type"] == "error"

    def test_blank_chat_message_should_get_error(self, client: TestClient) -> None:
        conversation_id = _open_conversation(client)

        with client.websocket_connect(f"/ws/conversations/{conversation_id}/chat") as websocket:
            websocket.send_json({"event": "chat", "data": {"message": "   "}})

            [event] = _receive_turn(websocket)

        assert event["type"] == "error"
