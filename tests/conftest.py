# -*- coding: utf-8 -*-
# tests/conftest.py
# Shared fixtures: a recording fake of requests.request and a settable clock.

import json
from collections import namedtuple
from urllib.parse import parse_qsl, urlparse

import pytest

FakeCall = namedtuple('FakeCall', ['method', 'url', 'path', 'query', 'data', 'headers', 'auth', 'timeout'])

FIXED_NOW = 1500000000.0


class FakeResponse(object):
    def __init__(self, status_code, content):
        self.status_code = status_code
        self.content = content

    @property
    def text(self):
        return self.content.decode('utf-8')


class FakeSession(object):
    """
    Stand-in for the requests module.

    Routes are matched on method, URL path and optional parameter values found
    in the query string or a form body; the most recently added route wins.
    Unrouted requests answer HTTP 404.
    """

    def __init__(self):
        self.routes = []
        self.calls = []

    def add(self, method, path, body, status=200, **match):
        if isinstance(body, (dict, list)):
            content = json.dumps(body).encode('utf-8')
        elif isinstance(body, str):
            content = body.encode('utf-8')
        else:
            content = body
        self.routes.append((method.upper(), path, match, status, content))
        return self

    def request(self, method, url, data=None, headers=None, auth=None, timeout=None, proxies=None):
        parsed = urlparse(url)
        query = dict(parse_qsl(parsed.query, keep_blank_values=True))
        call = FakeCall(method.upper(), url, parsed.path, query, data, dict(headers or {}), auth, timeout)
        self.calls.append(call)
        params = dict(query)
        params.update(form_of(call))
        for route_method, path, match, status, content in reversed(self.routes):
            if route_method != call.method or path != call.path:
                continue
            if all(str(params.get(k)) == str(v) for k, v in match.items()):
                return FakeResponse(status, content)
        return FakeResponse(404, b'{"error": "not routed"}')

    def calls_to(self, path, method=None):
        return [c for c in self.calls if c.path == path and (method is None or c.method == method)]

    def last(self, path=None):
        calls = self.calls if path is None else self.calls_to(path)
        assert calls, "no request to %s" % path
        return calls[-1]


def form_of(call):
    """Decode a form body into a dict; JSON and empty bodies give {}."""
    data = call.data
    if not data:
        return {}
    if isinstance(data, bytes):
        data = data.decode('utf-8')
    if data.lstrip().startswith(('{', '[')):
        return {}
    return dict(parse_qsl(data, keep_blank_values=True))


def json_of(call):
    return json.loads(call.data)


class FixedClock(object):
    """Callable clock returning a settable epoch-seconds value."""

    def __init__(self, now=FIXED_NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def clock():
    return FixedClock()
