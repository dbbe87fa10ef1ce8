from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.i18n import translator_for_request

_LOG = logging.getLogger("app.errors")


class BadQueryError(HTTPException):
    """A query descriptor the engine cannot translate.

    ``detail`` carries a message key from the locale catalogue, ``params``
    the values interpolated into it.
    """

    def __init__(self, message: str = "badRequest", **params: Any):
        super().__init__(status_code=400, detail=message)
        self.params = params


def _error_payload(message: str, status_code: int) -> dict[str, Any]:
    return {"type": "Error", "message": message, "statusCode": status_code}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        translator = translator_for_request(request)
        params = getattr(exc, "params", None) or {}
        detail = exc.detail if isinstance(exc.detail, str) else "badRequest"
        if isinstance(exc, BadQueryError):
            _LOG.info("rejected query path=%s reason=%s params=%s", request.url.path, detail, params)
        message = translator.t(detail, **params)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(message, exc.status_code),
            headers=getattr(exc, "headers", None),
        )
