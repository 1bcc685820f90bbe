"""Prometheus metrics for the radio service."""
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

relay_requests_total = Counter(
    'relay_requests_total',
    'Total number of relay requests',
    ['status']
)

relay_request_duration_seconds = Histogram(
    'relay_request_duration_seconds',
    'Time spent relaying a request to the directory',
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

directory_fetches_total = Counter(
    'directory_fetches_total',
    'Total number of directory fetches',
    ['kind', 'outcome']  # kind: 'stations', 'countries'; outcome: 'success', 'error'
)

stations_filtered_total = Counter(
    'stations_filtered_total',
    'Stations dropped from directory results',
    ['reason']  # 'insecure', 'playlist', 'invalid'
)

playback_attempts_total = Counter(
    'playback_attempts_total',
    'Total number of playback attempts',
    ['outcome']  # 'playing', 'failed', 'superseded', 'paused'
)

click_registrations_total = Counter(
    'click_registrations_total',
    'Click registrations sent to the directory',
    ['outcome']
)


def get_metrics() -> bytes:
    """Render all metrics in the Prometheus text format."""
    return generate_latest()


METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST
