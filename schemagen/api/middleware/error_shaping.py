from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from schemagen.core.errors import CompileError

log = logging.getLogger("schemagen.errors")


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


def _shaped(status_code: int, detail: Any, rid: Optional[str]) -> JSONResponse:
    payload: Dict[str, Any] = {"detail": detail}
    if rid:
        payload["request_id"] = rid
    return JSONResponse(status_code=status_code, content=payload)


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    Outermost error boundary of the generator API.

    - A CompileError that escapes an endpoint is still a problem with the
      submitted model: 422 with its to_dict() payload
    - Anything else: 500, traceback logged server-side only
    - request_id echoed in the body when known
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except CompileError as exc:
            rid = _request_id(request)
            log.warning("Compile error outside endpoint handling: %s rid=%s path=%s", exc, rid, request.url.path)
            return _shaped(422, exc.to_dict(), rid)
        except Exception:
            rid = _request_id(request)
            log.exception("Unhandled error rid=%s path=%s", rid, request.url.path)
            return _shaped(500, "Internal Server Error", rid)
