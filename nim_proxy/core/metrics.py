"""Prometheus metrics for the NIM proxy"""
from prometheus_client import Counter, Histogram, Gauge, Info

# Request metrics
REQUEST_COUNT = Counter(
    'nim_proxy_requests_total',
    'Total number of requests',
    ['method', 'endpoint', 'model', 'status_code']
)

REQUEST_DURATION = Histogram(
    'nim_proxy_request_duration_seconds',
    'Request duration in seconds',
    ['method', 'endpoint', 'model'],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0, float('inf'))
)

ACTIVE_REQUESTS = Gauge(
    'nim_proxy_active_requests',
    'Number of active requests',
    ['endpoint']
)

# Token usage metrics
TOKEN_USAGE = Counter(
    'nim_proxy_tokens_total',
    'Total number of tokens used',
    ['model', 'token_type']
)

# Streaming metrics
CLIENT_DISCONNECTS = Counter(
    'nim_proxy_client_disconnects_total',
    'Total number of client disconnections during streaming',
    ['model']
)

STREAM_ERRORS = Counter(
    'nim_proxy_stream_errors_total',
    'Streams terminated by a backend error',
    ['model']
)

MALFORMED_FRAMES = Counter(
    'nim_proxy_malformed_frames_total',
    'Backend event frames forwarded unchanged because their JSON did not parse',
    ['model']
)

# Application info
APP_INFO = Info('nim_proxy_app', 'Application information')
