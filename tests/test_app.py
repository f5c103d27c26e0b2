"""
Tests for the HTTP entry point.
"""

from unittest.mock import Mock, patch

import pytest

from payout_bot.core.errors import PersistenceError
from payout_bot.core.handler import HandlerResponse, Outcome
from payout_bot.web.app import HANDLER_KEY, create_app


@pytest.fixture
def handler():
    """Mock payout handler."""
    return Mock()


@pytest.fixture
def client(handler):
    app = create_app(handler=handler)
    return app.test_client()


class TestApp:
    """Test request handling."""

    def test_success_response(self, handler, client):
        handler.handle.return_value = HandlerResponse(200, "Success", Outcome.NO_NEW_PAYOUT)

        response = client.get("/", headers={"Authorization": "Bearer t"})

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Success"
        handler.handle.assert_called_once_with("Bearer t")

    def test_forbidden_response_is_json(self, handler, client):
        """Verify a 403 carries a JSON errors array."""
        handler.handle.return_value = HandlerResponse(
            403, {"errors": ["Unauthorized"]}, Outcome.UNAUTHORIZED
        )

        response = client.post("/api/update")

        assert response.status_code == 403
        assert response.get_json() == {"errors": ["Unauthorized"]}
        handler.handle.assert_called_once_with(None)

    @pytest.mark.parametrize("method", ["get", "post", "put", "delete", "patch"])
    def test_any_method(self, handler, client, method):
        handler.handle.return_value = HandlerResponse(200, "Success", Outcome.ANNOUNCED)
        response = getattr(client, method)("/anything")
        assert response.status_code == 200

    def test_handler_built_once(self):
        """Verify the factory runs on first request only."""
        handler = Mock()
        handler.handle.return_value = HandlerResponse(200, "Success", Outcome.NO_NEW_PAYOUT)
        factory = Mock(return_value=handler)
        app = create_app(handler_factory=factory)

        factory.assert_not_called()
        client = app.test_client()
        client.get("/")
        client.get("/")

        factory.assert_called_once_with()
        assert app.extensions[HANDLER_KEY] is handler
        assert handler.handle.call_count == 2

    def test_handler_error_is_server_error(self, handler):
        handler.handle.side_effect = RuntimeError("boom")
        app = create_app(handler=handler)

        response = app.test_client().get("/")

        assert response.status_code == 500


class TestHandlerFromEnvironment:
    """Test building the handler for a deployed function."""

    @pytest.fixture
    def build_handler(self):
        with patch('payout_bot.web.app.load_settings'), \
                patch('payout_bot.web.app.setup_logging'), \
                patch('payout_bot.web.app.build_handler') as mock:
            yield mock

    def test_checks_ledger_before_first_request(self, build_handler):
        handler = build_handler.return_value
        handler.handle.return_value = HandlerResponse(200, "Success", Outcome.NO_NEW_PAYOUT)
        app = create_app()

        response = app.test_client().get("/")

        assert response.status_code == 200
        handler.ledger.verify_writable.assert_called_once_with()
        handler.handle.assert_called_once()

    def test_read_only_ledger_fails_without_announcing(self, build_handler):
        """Verify an unwritable ledger is a server error and nothing runs."""
        handler = build_handler.return_value
        handler.ledger.verify_writable.side_effect = PersistenceError("Payout ledger is not writable")
        app = create_app()
        client = app.test_client()

        assert client.get("/").status_code == 500
        assert client.get("/").status_code == 500

        handler.handle.assert_not_called()
        assert HANDLER_KEY not in app.extensions
        assert handler.ledger.verify_writable.call_count == 2
