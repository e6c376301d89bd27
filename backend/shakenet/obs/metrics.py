"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"shakenet_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"shakenet_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SOCKET_CLIENTS = Gauge(
	"shakenet_socketio_clients",
	"Active Socket.IO clients per namespace",
	["namespace"],
)

SOCKET_EVENTS = Counter(
	"shakenet_socketio_events_total",
	"Socket.IO events emitted per namespace",
	["namespace", "event"],
)

GRAPH_BUILDS = Counter(
	"shakenet_graph_builds_total",
	"Network graph builds by result",
	["result"],
)

GRAPH_BUILD_LATENCY = Histogram(
	"shakenet_graph_build_duration_seconds",
	"Time spent scanning the friend store and building a network graph",
	buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

GRAPH_NODES = Histogram(
	"shakenet_graph_nodes",
	"Connected node count returned per network graph",
	buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500, 1000),
)

MEETS_TOTAL = Counter(
	"shakenet_meets_total",
	"Meet requests by result",
	["result"],
)

REDIS_UP = Gauge("shakenet_redis_up", "Redis availability (1=up,0=down)")
REDIS_LATENCY = Summary("shakenet_redis_latency_seconds", "Redis ping latency (seconds)")

POSTGRES_UP = Gauge("shakenet_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("shakenet_postgres_latency_seconds", "Postgres ping latency (seconds)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def socket_connected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).inc()


def socket_disconnected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).dec()


def socket_event(namespace: str, event: str) -> None:
	SOCKET_EVENTS.labels(namespace=namespace, event=event).inc()


def record_graph_build(result: str, *, duration_seconds: float | None = None, nodes: int | None = None) -> None:
	GRAPH_BUILDS.labels(result=result).inc()
	if duration_seconds is not None:
		GRAPH_BUILD_LATENCY.observe(duration_seconds)
	if nodes is not None:
		GRAPH_NODES.observe(nodes)


def inc_meet(result: str) -> None:
	MEETS_TOTAL.labels(result=result).inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
