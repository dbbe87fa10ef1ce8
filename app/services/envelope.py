from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.core.i18n import Translator

SUCCESS = "Success"
ERROR = "Error"


def service_result(type_: str, message: str, status_code: int, **data: Any) -> dict[str, Any]:
    """Untranslated ``{type, message, statusCode, ...data}`` returned by services."""
    return {"type": type_, "message": message, "statusCode": status_code, **data}


def success(message: str, status_code: int = 200, **data: Any) -> dict[str, Any]:
    return service_result(SUCCESS, message, status_code, **data)


def error(message: str, status_code: int) -> dict[str, Any]:
    return service_result(ERROR, message, status_code)


def respond(result: dict[str, Any], translator: Translator) -> JSONResponse:
    payload = dict(result)
    payload["message"] = translator.t(str(result.get("message") or ""))
    status_code = int(result.get("statusCode") or 200)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))
