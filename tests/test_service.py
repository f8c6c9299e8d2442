"""BuildingDataClient against a stubbed requests session."""

import pytest
import requests

from greenpulse import exceptions
from greenpulse.service import BuildingDataClient
from greenpulse.types import PredictRequest, SuggestRequest


class FauxResponse:
    def __init__(self, body=None, status=200, json_error=False):
        self._body = body
        self.status_code = status
        self._json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class FauxSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def request(self, method, url, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def _client(session):
    return BuildingDataClient("http://api.test/", timeout=3.0, session=session)


def test_fetch_building_frame_parses_records(api_records):
    session = FauxSession(FauxResponse(api_records))
    df = _client(session).fetch_building_frame(7)

    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["url"] == "http://api.test/building/7"
    assert session.calls[0]["timeout"] == 3.0
    assert len(df) == 3
    assert df.index.is_monotonic_increasing


def test_http_error_is_network_failure():
    session = FauxSession(FauxResponse({"detail": "nope"}, status=503))
    with pytest.raises(exceptions.NetworkFailure, match="503") as info:
        _client(session).fetch_building_records(1)
    assert isinstance(info.value, exceptions.HttpStatusError)
    assert info.value.status_code == 503


def test_connection_error_is_not_http_status_error():
    session = FauxSession(error=requests.ConnectionError("refused"))
    with pytest.raises(exceptions.NetworkFailure) as info:
        _client(session).fetch_building_records(1)
    assert not isinstance(info.value, exceptions.HttpStatusError)


def test_connection_error_is_network_failure():
    session = FauxSession(error=requests.ConnectionError("refused"))
    with pytest.raises(exceptions.NetworkFailure, match="Could not connect"):
        _client(session).fetch_building_records(1)


def test_non_json_body_is_invalid_response():
    session = FauxSession(FauxResponse(json_error=True))
    with pytest.raises(exceptions.InvalidResponse):
        _client(session).fetch_building_records(1)


def test_wrong_shape_is_invalid_response():
    session = FauxSession(FauxResponse({"records": []}))
    with pytest.raises(exceptions.InvalidResponse):
        _client(session).fetch_building_records(1)


def test_predict_future_usage_posts_request(api_records):
    session = FauxSession(FauxResponse(api_records[:2]))
    req = PredictRequest(building_id=7, user_params={"square_feet": 1000}, predict_hours=24)
    df = _client(session).predict_future_usage(req)

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/predict_future_usage")
    assert call["json"] == {"building_id": 7, "user_params": {"square_feet": 1000}, "predict_hours": 24}
    assert len(df) == 2


def test_suggest_param_adjustment_returns_object():
    session = FauxSession(FauxResponse({"air_temperature": 21.5}))
    req = SuggestRequest(building_id=7, user_params={}, target_usage=40.0)
    out = _client(session).suggest_param_adjustment(req)
    assert out == {"air_temperature": 21.5}
    assert session.calls[0]["json"]["target_usage"] == 40.0


def test_close_closes_session():
    session = FauxSession()
    _client(session).close()
    assert session.closed
