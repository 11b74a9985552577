# -*- coding: utf-8 -*-
# ccex/core/runtime/transport.py
# HTTP transport: one instance per venue, public GETs and signed private calls.

import json
from urllib.parse import urlencode, urlparse

import requests

from ccex.core.kernel.errors import AuthFailure, DecodeFailure, TransportFailure, VenueError
from ccex.core.runtime.logger import get_logger, truncate

DEFAULT_TIMEOUT = 10


class HttpTransport(object):
    """
    Thin wrapper around requests for a single venue.

    Args:
        venue: venue name used in errors and log records
        base_url: scheme + host (+ optional path prefix), e.g. 'https://api.binance.com'
        signer: Signer instance for private calls, None for public-only clients
        timeout: per-request timeout in seconds
        session: object with a requests-compatible request() method; defaults
                 to the requests module itself
        proxies: requests proxies mapping
        headers: headers added to every request
    """

    def __init__(self, venue, base_url, signer=None, timeout=DEFAULT_TIMEOUT,
                 session=None, proxies=None, headers=None):
        self.venue = venue
        self.base_url = base_url.rstrip('/')
        parsed = urlparse(self.base_url)
        self.host = parsed.netloc
        self.base_path = parsed.path
        self.signer = signer
        self.timeout = timeout
        self.session = session if session is not None else requests
        self.proxies = proxies
        self.headers = dict(headers or {})
        self.logger = get_logger('transport.' + venue)

    # ---- public ----
    def public_get(self, path, params=None, headers=None):
        """GET an unsigned endpoint and return the raw body bytes."""
        query = urlencode(list(params.items())) if params else ''
        return self._send('GET', path, query=query, headers=headers)

    def get_json(self, path, params=None, headers=None):
        return self.decode(self.public_get(path, params, headers), 'GET', path)

    # ---- private ----
    def private_call(self, method, path, params=None):
        """Sign and send a private request, return the raw body bytes."""
        method = method.upper()
        if self.signer is None:
            raise AuthFailure("client was created without credentials",
                              venue=self.venue, operation=method, path=path)
        signed = self.signer.sign(method, self.host, self.base_path + path, dict(params or {}))
        return self._send(method, path, query=signed.query, body=signed.body,
                          headers=signed.headers, auth=signed.auth)

    def private_json(self, method, path, params=None):
        return self.decode(self.private_call(method, path, params), method.upper(), path)

    # ---- internals ----
    def url_for(self, path, query=''):
        url = self.base_url + path
        if query:
            url += ('&' if '?' in url else '?') + query
        return url

    def _send(self, method, path, query='', body=None, headers=None, auth=None):
        url = self.url_for(path, query)
        merged = dict(self.headers)
        merged.update(headers or {})
        self.logger.debug("%s %s", method, path)
        try:
            response = self.session.request(method, url, data=body, headers=merged,
                                            auth=auth, timeout=self.timeout, proxies=self.proxies)
        except requests.exceptions.RequestException as e:
            raise TransportFailure(str(e) or e.__class__.__name__,
                                   venue=self.venue, operation=method, path=path) from e

        try:
            content = response.content
        except requests.exceptions.RequestException as e:
            raise DecodeFailure("failed to read body: %s" % e,
                                venue=self.venue, operation=method, path=path) from e

        status = response.status_code
        if status in (401, 403):
            self.logger.warning("%s %s rejected credentials: HTTP %d", method, path, status)
            raise AuthFailure("HTTP %d" % status, venue=self.venue, operation=method,
                              path=path, payload=truncate(content, 2000))
        if status >= 400:
            self.logger.warning("%s %s failed: HTTP %d %s", method, path, status, truncate(content))
            raise VenueError("HTTP %d" % status, venue=self.venue, operation=method,
                             path=path, payload=truncate(content, 2000))
        return content

    def decode(self, content, method, path):
        """Parse a JSON body; any failure becomes DecodeFailure."""
        try:
            if isinstance(content, bytes):
                content = content.decode('utf-8')
            return json.loads(content)
        except ValueError as e:
            raise DecodeFailure("invalid JSON: %s" % e, venue=self.venue, operation=method,
                                path=path, payload=truncate(content)) from e
