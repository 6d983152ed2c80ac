import uuid
from decimal import Decimal
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def plain_numbers(value):
    """Recursively replace Decimal values (SQL aggregates) with int or float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: plain_numbers(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain_numbers(v) for v in value]
    return value


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", f"req_{uuid.uuid4().hex}")


def _body(request: Request, data) -> dict:
    return {
        "success": True,
        "data": jsonable_encoder(plain_numbers(data)),
        "request_id": _request_id(request),
    }


def ok(request: Request, data):
    return JSONResponse(status_code=200, content=_body(request, data))


def created(request: Request, data):
    return JSONResponse(status_code=201, content=_body(request, data))


def err(request: Request, code: str, message: str, status_code: int = 400, details=None):
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message, "details": jsonable_encoder(details or {})},
            "request_id": _request_id(request),
        },
    )
