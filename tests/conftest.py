"""Global pytest fixtures & helpers.

Adds project root to path and provides a fake HTTP session so API tests can
script backend responses without network access.
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from crownbreaker.api_client import KomOptimizerClient
from crownbreaker.session import SessionContext


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None, text=None, headers=None):
        self.status_code = status_code
        self._data = data
        self._text = text
        self.headers = headers or {}
        self.url = "http://test"

    def json(self):
        if self._data is None and self._text is not None:
            raise ValueError("not json")
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    @property
    def text(self):
        if self._text is not None:
            return self._text
        try:
            return json.dumps(self._data)
        except Exception:
            return str(self._data)


class FakeSession:
    """Returns queued responses and records every request."""

    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self.responses: List[Any] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": headers or {},
                "params": params,
                "json": json,
                "timeout": timeout,
            }
        )
        if not self.responses:
            raise AssertionError(f"Unexpected request {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_segment_payload(segment_id, name, start, end, **extra):
    payload = {
        "id": segment_id,
        "name": name,
        "distance": 1000.0,
        "average_grade": 4.5,
        "maximum_grade": 9.0,
        "elevation_high": 300.0,
        "elevation_low": 250.0,
        "start_latlng": start,
        "end_latlng": end,
        "climb_category": 1,
        "city": "Lyon",
        "state": "Auvergne-Rhone-Alpes",
        "country": "France",
        "private": False,
        "starred": True,
    }
    payload.update(extra)
    return payload


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def context():
    ctx = SessionContext()
    ctx.login("jwt-token-1234", {"firstname": "Alex"})
    return ctx


@pytest.fixture
def client(context, fake_session):
    return KomOptimizerClient(
        context,
        session=fake_session,
        base_url="https://api.test/api",
        auth_base_url="https://api.test/api",
    )


@pytest.fixture
def starred_payload():
    return {
        "segments": [
            make_segment_payload(
                1, "Croix-Rousse", [45.0, 4.0], [45.5, 4.2],
                map={"id": "s1", "polyline": "_p~iF~ps|U_ulLnnqC", "summary_polyline": ""},
            ),
            make_segment_payload(2, "Fourviere", [46.0, 5.0], [45.8, 4.9]),
        ]
    }
