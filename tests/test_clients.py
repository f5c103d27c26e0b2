"""
Unit tests for external service clients.

Tests request shapes and error wrapping with mocked HTTP sessions.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from payout_bot.clients.discord import DiscordWebhook
from payout_bot.clients.identity_directory import IdentityDirectory
from payout_bot.clients.subgraph import LATEST_REDEMPTION_QUERY, SubgraphClient
from payout_bot.clients.twitter import STATUS_UPDATE_URL, TwitterClient
from payout_bot.config.loader import TwitterCredentials
from payout_bot.core.errors import NotificationError, UpstreamFetchError


RAW_EVENT = {
    "timestamp": 1612700000,
    "faceValue": "0.0512",
    "faceValueUSD": "82.61",
    "recipient": {"id": "0x525419ff5707190389bfb5c87c375d710f5fcb0e"},
    "transaction": {"id": "0xfeed"},
}


def _response(json_data=None, status_error=None, json_error=None):
    response = Mock()
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


class TestSubgraphClient:
    """Test the redemption event source."""

    def test_query_shape(self):
        """Verify the query asks for exactly one newest event."""
        assert "winningTicketRedeemedEvents" in LATEST_REDEMPTION_QUERY
        assert "first: 1" in LATEST_REDEMPTION_QUERY
        assert "orderBy: timestamp" in LATEST_REDEMPTION_QUERY
        assert "orderDirection: desc" in LATEST_REDEMPTION_QUERY
        for field in ("timestamp", "faceValue", "faceValueUSD", "recipient", "transaction"):
            assert field in LATEST_REDEMPTION_QUERY

    def test_fetch_latest_redemption(self):
        """Verify the newest event is parsed from the response."""
        session = Mock()
        session.post.return_value = _response(
            {"data": {"winningTicketRedeemedEvents": [RAW_EVENT]}}
        )
        client = SubgraphClient("https://graph.example/sub", timeout=3, session=session)

        event = client.fetch_latest_redemption()

        session.post.assert_called_once_with(
            "https://graph.example/sub",
            json={"query": LATEST_REDEMPTION_QUERY},
            timeout=3
        )
        assert event.timestamp == 1612700000
        assert event.face_value == "0.0512"
        assert event.face_value_usd == "82.61"
        assert event.recipient == RAW_EVENT["recipient"]["id"]
        assert event.transaction == "0xfeed"

    def test_network_error(self):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("down")
        client = SubgraphClient(session=session)

        with pytest.raises(UpstreamFetchError, match="Subgraph request failed") as exc:
            client.fetch_latest_redemption()
        assert exc.value.code == "UPSTREAM_FETCH_ERROR"

    def test_http_error(self):
        session = Mock()
        session.post.return_value = _response(status_error=requests.HTTPError("502"))
        with pytest.raises(UpstreamFetchError):
            SubgraphClient(session=session).fetch_latest_redemption()

    def test_invalid_json(self):
        session = Mock()
        session.post.return_value = _response(json_error=ValueError("bad json"))
        with pytest.raises(UpstreamFetchError, match="invalid JSON"):
            SubgraphClient(session=session).fetch_latest_redemption()

    def test_graphql_errors(self):
        """Verify GraphQL errors fail the fetch."""
        session = Mock()
        session.post.return_value = _response({"errors": [{"message": "indexing error"}]})
        with pytest.raises(UpstreamFetchError, match="query failed") as exc:
            SubgraphClient(session=session).fetch_latest_redemption()
        assert exc.value.details["errors"] == [{"message": "indexing error"}]

    def test_empty_result(self):
        session = Mock()
        session.post.return_value = _response({"data": {"winningTicketRedeemedEvents": []}})
        with pytest.raises(UpstreamFetchError, match="no redemption events"):
            SubgraphClient(session=session).fetch_latest_redemption()

    def test_malformed_event(self):
        session = Mock()
        session.post.return_value = _response(
            {"data": {"winningTicketRedeemedEvents": [{"timestamp": 1}]}}
        )
        with pytest.raises(UpstreamFetchError, match="Malformed"):
            SubgraphClient(session=session).fetch_latest_redemption()


class TestIdentityDirectory:
    """Test best-effort profile lookups."""

    def test_get_profile(self):
        session = Mock()
        session.get.return_value = _response({"name": "Orchestrator"})
        directory = IdentityDirectory("https://ipfs.3box.io/", timeout=4, session=session)

        profile = directory.get_profile("0xabc")

        assert profile == {"name": "Orchestrator"}
        session.get.assert_called_once_with(
            "https://ipfs.3box.io/profile",
            params={"address": "0xabc"},
            timeout=4
        )

    def test_get_space(self):
        session = Mock()
        session.get.return_value = _response({"defaultProfile": "livepeer"})
        directory = IdentityDirectory(session=session)

        space = directory.get_space("0xabc", "livepeer")

        assert space == {"defaultProfile": "livepeer"}
        args, kwargs = session.get.call_args
        assert args[0] == "https://ipfs.3box.io/space"
        assert kwargs["params"] == {"address": "0xabc", "name": "livepeer"}

    def test_http_error_is_absent(self):
        """Verify a failed lookup returns None instead of raising."""
        session = Mock()
        session.get.return_value = _response(status_error=requests.HTTPError("404"))
        assert IdentityDirectory(session=session).get_profile("0xabc") is None

    def test_network_error_is_absent(self):
        session = Mock()
        session.get.side_effect = requests.Timeout("slow")
        assert IdentityDirectory(session=session).get_space("0xabc") is None

    def test_invalid_json_is_absent(self):
        session = Mock()
        session.get.return_value = _response(json_error=ValueError("not json"))
        assert IdentityDirectory(session=session).get_profile("0xabc") is None

    def test_non_object_is_absent(self):
        session = Mock()
        session.get.return_value = _response(["unexpected"])
        assert IdentityDirectory(session=session).get_profile("0xabc") is None


class TestTwitterClient:
    """Test status posting."""

    @patch('payout_bot.clients.twitter.OAuth1Session')
    def test_from_credentials(self, mock_session_class):
        """Verify the OAuth1 session is built from all four secrets."""
        credentials = TwitterCredentials("ck", "cs", "ak", "as")

        client = TwitterClient.from_credentials(credentials, timeout=7)

        mock_session_class.assert_called_once_with(
            client_key="ck",
            client_secret="cs",
            resource_owner_key="ak",
            resource_owner_secret="as"
        )
        assert client.session is mock_session_class.return_value
        assert client.timeout == 7

    def test_post_status(self):
        session = Mock()
        session.post.return_value = _response({"id_str": "123"})
        client = TwitterClient(session, timeout=5)

        tweet = client.post_status("hello")

        session.post.assert_called_once_with(
            STATUS_UPDATE_URL,
            data={"status": "hello"},
            timeout=5
        )
        assert tweet == {"id_str": "123"}

    @pytest.mark.parametrize("body", [["123"], "ok", None, 5])
    def test_non_object_body_after_post(self, body):
        """Verify an accepted post with an odd body does not raise."""
        session = Mock()
        session.post.return_value = _response(body)

        assert TwitterClient(session).post_status("hello") == {}

    def test_unparseable_body_after_post(self):
        session = Mock()
        session.post.return_value = _response(json_error=ValueError("no json"))
        assert TwitterClient(session).post_status("hello") == {}

    def test_rejected_post_raises(self):
        """Verify API rejections are loud."""
        session = Mock()
        session.post.return_value = _response(status_error=requests.HTTPError("403 duplicate"))

        with pytest.raises(NotificationError, match="Twitter post failed") as exc:
            TwitterClient(session).post_status("hello")
        assert exc.value.channel == "twitter"
        assert exc.value.details["channel"] == "twitter"

    def test_network_error_raises(self):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(NotificationError):
            TwitterClient(session).post_status("hello")


class TestDiscordWebhook:
    """Test webhook delivery."""

    def test_send(self):
        session = Mock()
        session.post.return_value = _response()
        webhook = DiscordWebhook("https://discord.com/api/webhooks/1/abc", timeout=6, session=session)
        payload = {"username": "bot", "embeds": [{"title": "t"}]}

        webhook.send(payload)

        session.post.assert_called_once_with(
            "https://discord.com/api/webhooks/1/abc",
            json=payload,
            timeout=6
        )

    def test_failure_raises(self):
        session = Mock()
        session.post.return_value = _response(status_error=requests.HTTPError("400"))
        webhook = DiscordWebhook("https://discord.com/api/webhooks/1/abc", session=session)

        with pytest.raises(NotificationError, match="Discord webhook failed") as exc:
            webhook.send({"embeds": []})
        assert exc.value.channel == "discord"

    def test_url_required(self):
        with pytest.raises(ValueError, match="webhook url is required"):
            DiscordWebhook("")
