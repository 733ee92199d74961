"""
Prometheus-style request metrics.
"""
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chat.core.config import get_settings

router = APIRouter(tags=["Metrics"])

# (method, path, status) -> count
_requests_total: Dict[Tuple[str, str, int], int] = defaultdict(int)
# (method, path) -> [sum_seconds, count]
_request_duration: Dict[Tuple[str, str], List[float]] = defaultdict(lambda: [0.0, 0])
_startup_time: Optional[float] = None


def record_request(method: str, path: str, status_code: int, duration: float) -> None:
    """Record an HTTP request metric."""
    _requests_total[(method, path, status_code)] += 1
    bucket = _request_duration[(method, path)]
    bucket[0] += duration
    bucket[1] += 1


def set_startup_time() -> None:
    """Record application startup time."""
    global _startup_time
    _startup_time = time.time()


def reset_metrics() -> None:
    _requests_total.clear()
    _request_duration.clear()


def _route_path(request: Request) -> str:
    # Route template keeps label cardinality bounded
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        record_request(
            method=request.method,
            path=_route_path(request),
            status_code=response.status_code,
            duration=duration,
        )

        return response


def generate_prometheus_metrics() -> str:
    """Generate Prometheus-format metrics output."""
    settings = get_settings()
    lines = [
        "# HELP chat_app_info Application information",
        "# TYPE chat_app_info gauge",
        f'chat_app_info{{version="{settings.app_version}"}} 1',
        "",
    ]

    if _startup_time:
        lines.append("# HELP chat_start_time_seconds Unix timestamp when the app started")
        lines.append("# TYPE chat_start_time_seconds gauge")
        lines.append(f"chat_start_time_seconds {_startup_time:.3f}")
        lines.append("")

    lines.append("# HELP http_requests_total Total number of HTTP requests")
    lines.append("# TYPE http_requests_total counter")
    for (method, path, status), count in sorted(_requests_total.items()):
        lines.append(f'http_requests_total{{method="{method}",path="{path}",status="{status}"}} {count}')
    lines.append("")

    lines.append("# HELP http_request_duration_seconds HTTP request duration in seconds")
    lines.append("# TYPE http_request_duration_seconds summary")
    for (method, path), (total, count) in sorted(_request_duration.items()):
        labels = f'method="{method}",path="{path}"'
        lines.append(f"http_request_duration_seconds_sum{{{labels}}} {total:.6f}")
        lines.append(f"http_request_duration_seconds_count{{{labels}}} {int(count)}")

    return "\n".join(lines) + "\n"


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Returns metrics in Prometheus exposition format.",
    response_class=Response,
)
async def metrics() -> Response:
    return Response(
        content=generate_prometheus_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
