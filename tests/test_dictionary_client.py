"""Tests for core.dictionary_client module."""

from unittest.mock import Mock

import pytest
import requests

from core.dictionary_client import DictionaryClient

SAMPLE_ENTRY = [
    {
        "word": "crane",
        "meanings": [
            {
                "partOfSpeech": "noun",
                "definitions": [{"definition": "A large, long-necked wading bird."}],
            }
        ],
    }
]


def make_response(status_code=200, payload=None, json_error=None):
    response = Mock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return DictionaryClient(base_url="https://dict.example/entries/en/", timeout_sec=2.0, session=session)


class TestLookup:
    """Tests for DictionaryClient.lookup()."""

    def test_found_word_returns_first_definition(self, client, session):
        session.get.return_value = make_response(200, SAMPLE_ENTRY)

        result = client.lookup("CRANE")

        assert result.success
        assert result.value.found
        assert result.value.word == "crane"
        assert result.value.definition == "A large, long-necked wading bird."

    def test_requests_lowercase_word_with_timeout(self, client, session):
        session.get.return_value = make_response(200, SAMPLE_ENTRY)

        client.lookup(" Crane ")

        session.get.assert_called_once_with("https://dict.example/entries/en/crane", timeout=2.0)

    def test_404_is_successful_not_found(self, client, session):
        session.get.return_value = make_response(404, {"title": "No Definitions Found"})

        result = client.lookup("xyzzy")

        assert result.success
        assert not result.value.found
        assert result.value.definition is None

    def test_server_error_is_failure(self, client, session):
        session.get.return_value = make_response(500)

        result = client.lookup("crane")

        assert not result.success
        assert "500" in result.error

    def test_transport_error_is_failure(self, client, session):
        session.get.side_effect = requests.ConnectionError("unreachable")

        result = client.lookup("crane")

        assert not result.success
        assert "unreachable" in result.error

    def test_timeout_is_failure(self, client, session):
        session.get.side_effect = requests.Timeout("too slow")

        assert not client.lookup("crane").success

    def test_invalid_json_is_failure(self, client, session):
        session.get.return_value = make_response(200, json_error=ValueError("bad json"))

        result = client.lookup("crane")

        assert not result.success
        assert "Malformed" in result.error

    @pytest.mark.parametrize("payload", [{}, [], "crane", None])
    def test_unexpected_payload_is_failure(self, client, session, payload):
        session.get.return_value = make_response(200, payload)

        assert not client.lookup("crane").success

    def test_entry_without_definitions_is_found(self, client, session):
        session.get.return_value = make_response(200, [{"word": "crane", "meanings": []}])

        result = client.lookup("crane")

        assert result.success
        assert result.value.found
        assert result.value.definition is None
