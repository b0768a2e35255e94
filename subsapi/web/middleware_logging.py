# subsapi/web/middleware_logging.py
from __future__ import annotations
import logging, time, uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

log = logging.getLogger("http")

SAFE_HEADERS = {"content-type", "user-agent", "x-request-id", "x-real-ip", "x-forwarded-for"}


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()
        scope = request.scope
        method = scope.get("method")
        path = scope.get("path")
        client = scope.get("client")
        addr = f"{client[0]}:{client[1]}" if client else "?:?"

        headers = {k.lower(): v for k, v in request.headers.items() if k.lower() in SAFE_HEADERS}

        log.info("http_request method=%s path=%s client=%s", method, path, addr, extra={
            "rid": rid, "ctype": headers.get("content-type", ""),
        })

        request.state.request_id = rid

        try:
            response: Response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            log.exception("http_error path=%s ms=%.2f", path, elapsed, extra={"rid": rid})
            raise
        elapsed = (time.perf_counter() - start) * 1000
        log.info("http_response status=%s path=%s ms=%.2f", response.status_code, path, elapsed,
                 extra={"rid": rid})
        response.headers["x-request-id"] = rid
        return response
