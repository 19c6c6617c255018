#!/usr/bin/env python3
"""
Fence API Server — Local HTTP surface over SentryQueryService.

Provides endpoints for dashboards and scripts to:
- Browse today's log entries, sessions, and incident reports
- Run skill scans and read the last scan snapshot
- Read and replace the tool policy
- Export entries as JSON or CSV

All endpoints require the X-ClawSentry-Secret header. The secret is
generated per process unless one is passed in, and the server binds to
127.0.0.1 by default.

Import from: clawsentry.fence.api_server
"""

from __future__ import annotations

import hmac
import json
import logging
import secrets
import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

from clawsentry.core.constants import (
    API_MAX_BODY_BYTES, API_SECRET_BYTES, DEFAULT_API_HOST, DEFAULT_API_PORT,
)
from clawsentry.core.version import __version__
from clawsentry.fence.query import SentryQueryService

__all__ = ['SentryAPIServer', 'SECRET_HEADER']

logger = logging.getLogger("clawsentry.fence.api_server")

SECRET_HEADER = 'X-ClawSentry-Secret'


class SentryAPIServer:
    """HTTP API for the fence, served from a background thread.

    Usage:
        api = SentryAPIServer(SentryQueryService(fence), port=18790)
        api.start()  # Non-blocking
        print(api.api_secret)
        api.stop()
    """

    def __init__(self, query: SentryQueryService, *,
                 host: str = DEFAULT_API_HOST,
                 port: int = DEFAULT_API_PORT,
                 api_secret: Optional[str] = None):
        self._query = query
        self._host = host
        self._port = port
        self._api_secret = api_secret or secrets.token_hex(API_SECRET_BYTES)
        self._server = None
        self._thread = None

    @property
    def api_secret(self) -> str:
        return self._api_secret

    @property
    def port(self) -> int:
        """Bound port; differs from the requested one when that was 0."""
        if self._server is not None:
            return self._server.server_address[1]
        return self._port

    @property
    def host(self) -> str:
        return self._host

    def start(self) -> bool:
        try:
            handler_class = self._create_handler_class()
            self._server = ThreadingHTTPServer((self._host, self._port), handler_class)
            self._server.daemon_threads = True
            self._thread = threading.Thread(
                target=self._server.serve_forever,
                name="clawsentry-api",
                daemon=True,
            )
            self._thread.start()
            logger.info("ClawSentry API started on %s:%d", self._host, self.port)
            return True
        except OSError as e:
            logger.error("Cannot start ClawSentry API: %s", e)
            self._server = None
            return False

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
            logger.info("ClawSentry API stopped")
        if self._thread:
            self._thread.join(5)
            self._thread = None

    def _create_handler_class(self):
        """Create the request handler class with closure over server state."""
        api_server = self
        query = self._query

        class SentryHandler(BaseHTTPRequestHandler):

            def log_message(self, format, *args):
                logger.debug("%s - %s", self.address_string(), format % args)

            def _verify_auth(self) -> bool:
                provided = self.headers.get(SECRET_HEADER, '')
                return hmac.compare_digest(provided.encode('utf-8'),
                                           api_server._api_secret.encode('utf-8'))

            def _send_body(self, body: bytes, content_type: str, status: int = 200,
                           filename: Optional[str] = None):
                self.send_response(status)
                self.send_header('Content-Type', content_type)
                self.send_header('Content-Length', str(len(body)))
                if filename:
                    self.send_header('Content-Disposition', f'attachment; filename={filename}')
                self.end_headers()
                self.wfile.write(body)

            def _send_json(self, data: Any, status: int = 200):
                body = json.dumps(data, default=str).encode('utf-8')
                self._send_body(body, 'application/json; charset=utf-8', status)

            def _read_body(self) -> Optional[bytes]:
                try:
                    content_length = int(self.headers.get('Content-Length', 0))
                except ValueError:
                    self._send_json({'ok': False, 'error': 'Invalid Content-Length'}, 400)
                    return None
                if content_length > API_MAX_BODY_BYTES:
                    self._send_json({'ok': False, 'error': 'Request too large'}, 413)
                    return None
                if content_length <= 0:
                    return b''
                return self.rfile.read(content_length)

            @staticmethod
            def _param(params: Dict[str, list], name: str) -> Optional[str]:
                values = params.get(name)
                if not values or not values[0]:
                    return None
                return values[0]

            def _filters(self, params: Dict[str, list]) -> Dict[str, Any]:
                minutes = self._param(params, 'minutes')
                try:
                    minutes = float(minutes) if minutes is not None else None
                except ValueError:
                    minutes = None
                return {
                    'severity': self._param(params, 'severity'),
                    'tool': self._param(params, 'tool'),
                    'session_id': self._param(params, 'sessionId'),
                    'minutes': minutes,
                }

            def do_GET(self):
                if not self._verify_auth():
                    self._send_json({'error': 'Unauthorized'}, 401)
                    return
                self._dispatch(self._route_get)

            def do_POST(self):
                if not self._verify_auth():
                    self._send_json({'error': 'Unauthorized'}, 401)
                    return
                self._dispatch(self._route_post)

            def _dispatch(self, route):
                try:
                    route()
                except Exception as e:
                    logger.exception("ClawSentry API error on %s", self.path)
                    self._send_json({'error': str(e)}, 500)

            # ---- GET routes ----

            def _route_get(self):
                url = urlparse(self.path)
                path = url.path.rstrip('/') or '/'
                params = parse_qs(url.query)

                if path == '/clawsentry/health':
                    self._send_json({
                        'status': 'ok',
                        'version': __version__,
                        'timestamp': datetime.now(timezone.utc).isoformat(),
                    })

                elif path == '/clawsentry/logs':
                    self._send_json(query.list_entries(**self._filters(params)))

                elif path == '/clawsentry/sessions':
                    self._send_json(query.list_sessions())

                elif path == '/clawsentry/session':
                    self._send_json(query.session_entries(self._param(params, 'sessionId')))

                elif path == '/clawsentry/incident':
                    self._send_json(query.incident_report(self._param(params, 'sessionId')))

                elif path == '/clawsentry/scan':
                    self._send_json(query.scan_all())

                elif path == '/clawsentry/scan-last':
                    self._send_json(query.get_last_scan())

                elif path == '/clawsentry/scan-skill':
                    self._send_json(query.scan_one(self._param(params, 'name') or ''))

                elif path == '/clawsentry/policy':
                    self._send_json(query.get_policy())

                elif path == '/clawsentry/config':
                    self._send_json(query.get_config())

                elif path == '/clawsentry/export.json':
                    text = query.export_json(**self._filters(params))
                    body = text.encode('utf-8', 'backslashreplace')
                    self._send_body(body, 'application/json; charset=utf-8',
                                    filename='clawsentry.json')

                elif path == '/clawsentry/export.csv':
                    text = query.export_csv(**self._filters(params))
                    body = text.encode('utf-8', 'backslashreplace')
                    self._send_body(body, 'text/csv; charset=utf-8',
                                    filename='clawsentry.csv')

                else:
                    self._send_json({'error': 'Not found'}, 404)

            # ---- POST routes ----

            def _route_post(self):
                path = urlparse(self.path).path.rstrip('/')

                if path == '/clawsentry/policy':
                    self._handle_set_policy()
                else:
                    self._send_json({'error': 'Not found'}, 404)

            def _handle_set_policy(self):
                body = self._read_body()
                if body is None:
                    return
                result = query.set_policy(body)
                self._send_json(result, 200 if result.get('ok') else 400)

        return SentryHandler
