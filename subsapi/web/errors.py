# subsapi/web/errors.py
from __future__ import annotations
import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from subsapi.errors import AppError

log = logging.getLogger("errors")


def _body(code: str, detail, rid: str) -> dict:
    return {"ok": False, "error": code, "detail": detail, "rid": rid}


async def app_error_handler(request: Request, exc: AppError):
    rid = getattr(request.state, "request_id", "-")
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    log.log(level, "app_error code=%s status=%s detail=%s", exc.code, exc.status_code, exc.detail,
            extra={"rid": rid})
    if exc.status_code >= 500:
        # the cause stays in the logs only
        return JSONResponse(_body(exc.code, exc.default_detail(), rid), status_code=exc.status_code)
    return JSONResponse(_body(exc.code, exc.detail, rid), status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    rid = getattr(request.state, "request_id", "-")
    log.warning("validation_error detail=%s", exc.errors(), extra={"rid": rid})
    detail = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(_body("invalid_input", detail, rid), status_code=400)


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = getattr(request.state, "request_id", "-")
    log.error(
        "unhandled_exception path=%s error=%r", request.url.path, exc,
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"rid": rid},
    )
    # no internals in the response
    return JSONResponse(_body("internal_error", "An unexpected error occurred.", rid), status_code=500)
