import json

import pytest
import requests

from hla.api.client import LeagueAPIClient
from hla.exceptions import (
    AuthenticationError,
    DecodeError,
    HTTPStatusError,
    NetworkError,
    NotFoundError,
    RateLimitError,
)


class _FakeResponse:
    def __init__(self, status_code=200, body=None, text=None, headers=None):
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text
        self.content = text.encode()
        self.headers = headers or {}

    def json(self):
        return json.loads(self.text)


class _FakeSession:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        pass


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)


def make_client(*outcomes):
    client = LeagueAPIClient("http://league.test/", timeout=5)
    client.session = _FakeSession(*outcomes)  # type: ignore[assignment]
    return client


PAGE = {
    "items": [],
    "total": 0,
    "page": 1,
    "page_size": 20,
    "total_pages": 0,
    "has_next": False,
    "has_previous": False,
}


class TestRequests:
    def test_list_page_sends_params_and_token(self):
        client = make_client(_FakeResponse(body=PAGE))
        assert client.list_page("/country", {"page": 1, "page_size": 20}, token="abc") == PAGE

        method, url, kwargs = client.session.requests[0]
        assert (method, url) == ("GET", "http://league.test/country")
        assert kwargs["params"] == {"page": 1, "page_size": 20}
        assert kwargs["headers"]["Authorization"] == "Bearer abc"
        assert kwargs["timeout"] == 5

    def test_no_token_no_authorization_header(self):
        client = make_client(_FakeResponse(body=PAGE))
        client.list_page("/country", {})
        assert "Authorization" not in client.session.requests[0][2]["headers"]

    def test_patch_status_sends_raw_boolean(self):
        client = make_client(_FakeResponse(status_code=204))
        assert client.patch_status("/country", 7, False) is None
        method, url, kwargs = client.session.requests[0]
        assert (method, url) == ("PATCH", "http://league.test/country/7")
        assert kwargs["json"] is False

    def test_create_returns_new_id(self):
        client = make_client(_FakeResponse(status_code=201, body={"id": 12}))
        assert client.create("/team", {"name": None, "country_id": 1}) == 12

    def test_score_event_endpoints(self):
        client = make_client(
            _FakeResponse(body=[]),
            _FakeResponse(status_code=201, body={"id": 3}),
            _FakeResponse(status_code=201, body={"id": 4}),
            _FakeResponse(status_code=204),
        )
        assert client.score_events(7) == []
        assert client.create_score_event(7, {"team_id": 1}) == 3
        assert client.identify_goal(7, {"team_id": 1}) == 4
        assert client.delete_score_event(7, 3) is None
        assert [(method, url) for method, url, _ in client.session.requests] == [
            ("GET", "http://league.test/match/7/score-events"),
            ("POST", "http://league.test/match/7/score-events"),
            ("POST", "http://league.test/match/7/identify-goal"),
            ("DELETE", "http://league.test/match/7/score-events/3"),
        ]

    def test_score_events_must_be_a_list(self):
        client = make_client(_FakeResponse(body={"items": []}))
        with pytest.raises(DecodeError):
            client.score_events(7)

    def test_requires_open_session(self):
        client = LeagueAPIClient("http://league.test")
        with pytest.raises(RuntimeError):
            client.list_page("/country", {})


class TestErrors:
    @pytest.mark.parametrize(
        "status,error",
        [(401, AuthenticationError), (404, NotFoundError), (429, RateLimitError), (500, HTTPStatusError)],
    )
    def test_status_mapping(self, status, error):
        client = make_client(_FakeResponse(status_code=status, text="nope"))
        with pytest.raises(error) as info:
            client.list_page("/team", {})
        assert info.value.status_code == status
        assert info.value.response_text == "nope"

    def test_retry_after_is_parsed(self):
        client = make_client(_FakeResponse(status_code=429, text="", headers={"Retry-After": "3"}))
        with pytest.raises(RateLimitError) as info:
            client.list_page("/team", {})
        assert info.value.retry_after == 3

    def test_invalid_json_is_decode_error(self):
        client = make_client(_FakeResponse(text="<html>"))
        with pytest.raises(DecodeError):
            client.list_page("/team", {})

    def test_empty_body_is_decode_error_for_reads(self):
        client = make_client(_FakeResponse(text=""))
        with pytest.raises(DecodeError):
            client.list_page("/team", {})

    def test_get_retries_connection_errors(self):
        client = make_client(
            requests.exceptions.ConnectionError("refused"),
            requests.exceptions.ConnectionError("refused"),
            _FakeResponse(body=PAGE),
        )
        assert client.list_page("/team", {}) == PAGE
        assert len(client.session.requests) == 3

    def test_get_gives_up_with_network_error(self):
        client = make_client(*[requests.exceptions.Timeout("slow")] * 3)
        with pytest.raises(NetworkError) as info:
            client.list_page("/team", {})
        assert info.value.status_code == 0

    def test_post_is_not_retried(self):
        client = make_client(requests.exceptions.ConnectionError("refused"), _FakeResponse(body={"id": 1}))
        with pytest.raises(NetworkError):
            client.create("/team", {"name": "A", "country_id": 1})
        assert len(client.session.requests) == 1
