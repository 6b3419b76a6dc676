"""JSON error envelope shared by every non-2xx response of the API."""
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

# Documented API error codes, one per HTTP status the API answers with
ERR_INTERNAL_ERROR = 100500
ERR_UNAUTHORISED = 100401
ERR_BAD_REQUEST = 100400
ERR_INVALID_PARAMS = 100422
ERR_NOT_FOUND = 100404
ERR_UNKNOWN = 100999

_TITLES = {
    ERR_INTERNAL_ERROR: "Internal error",
    ERR_BAD_REQUEST: "Bad Request",
    ERR_UNAUTHORISED: "Unauthorised access",
    ERR_INVALID_PARAMS: "Invalid params",
    ERR_NOT_FOUND: "Not found",
}


class JsonError(BaseModel):
    code: int
    details: str


class ErrorResponse(BaseModel):
    error: JsonError


def new_error(code: int, details: str = "") -> JsonError:
    if code in _TITLES:
        title = _TITLES[code]
    else:
        code, title = ERR_UNKNOWN, "Unknown error"

    if details:
        title = f"{title} - {details}"
    return JsonError(code=code, details=title)


def _write(code: int, status_code: int, details: str, headers: dict = None) -> JSONResponse:
    body = ErrorResponse(error=new_error(code, details))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def internal_error(details: str = "") -> JSONResponse:
    return _write(ERR_INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


def unauthorised(details: str = "") -> JSONResponse:
    return _write(ERR_UNAUTHORISED, status.HTTP_401_UNAUTHORIZED, details, headers={"WWW-Authenticate": "Key"})


def bad_request(details: str = "") -> JSONResponse:
    return _write(ERR_BAD_REQUEST, status.HTTP_400_BAD_REQUEST, details)


def invalid_params(details: str = "") -> JSONResponse:
    return _write(ERR_INVALID_PARAMS, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


def not_found(details: str = "") -> JSONResponse:
    return _write(ERR_NOT_FOUND, status.HTTP_404_NOT_FOUND, details)
