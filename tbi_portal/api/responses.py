"""Action Responses — HTTP status for an operation's result envelope.

Invariants:
    - The envelope body is returned unchanged; only the status code depends on error_kind
    - No error_kind -> success status (200 unless the route says otherwise)
"""

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from tbi_portal.core.errors import ErrorKind

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.INTERNAL: 500,
    ErrorKind.UPSTREAM: 502,
}


def action_response(
    result: BaseModel,
    success_status: int = 200,
    overrides: dict[ErrorKind, int] | None = None,
) -> JSONResponse:
    kind = getattr(result, "error_kind", None)
    if kind is None:
        status_code = success_status
    else:
        status_code = (overrides or {}).get(kind, _STATUS_BY_KIND[kind])
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
