"""Observability middleware for context enrichment."""

import typing as t
import uuid

import structlog
from django.http import HttpRequest, HttpResponse

DEVICE_HEADER = "X-Device-Id"


class StructlogContextMiddleware:
    """Binds request metadata to every log event emitted while serving a request.

    Door scanners identify themselves with an ``X-Device-Id`` header, which is
    bound as ``device`` so scan logs can be followed per gate. The user is bound
    later by the controllers, once JWT authentication has run.
    """

    def __init__(self, get_response: t.Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
            ip_address=client_ip(request),
        )
        if device := request.headers.get(DEVICE_HEADER):
            structlog.contextvars.bind_contextvars(device=device[:120])

        try:
            response = self.get_response(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response["X-Request-ID"] = request_id
        return response


def client_ip(request: HttpRequest) -> str:
    """First address of X-Forwarded-For when behind the proxy, else REMOTE_ADDR."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return str(forwarded.split(",")[0].strip())
    return str(request.META.get("REMOTE_ADDR", "unknown"))
