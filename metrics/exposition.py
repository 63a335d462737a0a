"""Prometheus gauges for node resources and the HTTP endpoint that serves them.

The endpoint is a small Flask app served by werkzeug's threaded WSGI server.
Each connection gets its own daemon thread, so a stalled scraper neither
blocks other scrapes nor holds up shutdown.
"""
import logging
import re
import socket
import threading
from typing import List, Optional, Sequence

from flask import Flask, Response
from prometheus_client import CollectorRegistry, Gauge, generate_latest, CONTENT_TYPE_LATEST
from werkzeug.serving import make_server

logger = logging.getLogger(__name__)

_INVALID_LABEL_CHARS = re.compile(r'[^a-zA-Z0-9_]')


def sanitize_label_name(name: str) -> str:
    """Turn a Kubernetes label key into a valid Prometheus label name."""
    sanitized = _INVALID_LABEL_CHARS.sub('_', name)
    if not sanitized or sanitized[0].isdigit():
        sanitized = '_' + sanitized
    return sanitized


class NodeResourceMetrics:
    """The four exporter gauges, all registered on one registry."""

    def __init__(self, node_label_names: Sequence[str] = (), registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.node_label_names: List[str] = list(node_label_names)
        extra = [sanitize_label_name(n) for n in self.node_label_names]
        labels = ['node', 'resource'] + extra
        seen = {}
        for raw, name in zip(['node', 'resource'] + self.node_label_names, labels):
            if name in seen:
                raise ValueError(f"label {raw!r} maps to {name!r}, which is already used by {seen[name]!r}")
            seen[name] = raw

        self.requests = Gauge(
            'node_resource_requests', 'Gauge of node resource requests.',
            labels, registry=self.registry)
        self.limits = Gauge(
            'node_resource_limits', 'Gauge of node resource limits.',
            labels, registry=self.registry)
        self.occupancy = Gauge(
            'node_resource_occupancy', 'Occupancy percentage of node resource.',
            labels, registry=self.registry)
        # No node dimension: the score is a mean across every node.
        self.score = Gauge(
            'node_resource_score', 'Cumulative mean occupancy percentage of resource.',
            ['resource'] + extra, registry=self.registry)


def create_app(registry: CollectorRegistry) -> Flask:
    app = Flask(__name__)

    @app.route('/metrics')
    def metrics():
        return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)

    @app.route('/healthz')
    def healthz():
        return Response('ok', mimetype='text/plain')

    return app


class MetricsServer:
    """Stoppable HTTP listener for the metrics app.

    `serve()` blocks until `shutdown()` is called from another thread. A bind
    failure surfaces as OSError from `serve()`.
    """

    def __init__(self, app: Flask, host: str = '0.0.0.0', port: int = 8080):
        self.app = app
        self.host = host
        self.port = port
        self._server = None
        self._stopped = False
        self._lock = threading.Lock()
        self.ready = threading.Event()

    def serve(self) -> None:
        # Bind here so an unavailable port raises OSError; werkzeug exits the
        # process on bind failures it hits itself.
        sock = socket.create_server((self.host, self.port))
        try:
            server = make_server(self.host, self.port, self.app, threaded=True, fd=sock.fileno())
        finally:
            sock.close()
        with self._lock:
            if self._stopped:
                server.server_close()
                return
            self._server = server
            # Port 0 resolves to the bound ephemeral port
            self.port = server.port
        logger.info(f"Serving metrics on {self.host}:{self.port}/metrics")
        self.ready.set()
        server.serve_forever()

    def shutdown(self, timeout: float) -> bool:
        """Stop accepting connections and wait up to `timeout` seconds.

        Returns False when the grace period ran out before the server stopped.
        """
        with self._lock:
            self._stopped = True
            server = self._server
        if server is None:
            return True

        stopper = threading.Thread(target=server.shutdown, name='metrics-server-shutdown', daemon=True)
        stopper.start()
        stopper.join(timeout)
        if stopper.is_alive():
            logger.warning(f"Metrics server did not stop within {timeout}s, closing socket")
            server.server_close()
            return False
        return True
