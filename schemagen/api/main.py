from __future__ import annotations

from fastapi import FastAPI

from schemagen.api.endpoints import health
from schemagen.api.endpoints import metrics as metrics_ep
from schemagen.api.endpoints import metrics_export
from schemagen.api.endpoints.models import router as models_router
from schemagen.api.middleware.error_shaping import SafeErrorMiddleware
from schemagen.api.middleware.request_context import RequestContextMiddleware

app = FastAPI(
    title="schemagen",
    version="0.1.0",
)

# ------------------------------------------------------------
# Middleware stack (ORDER MATTERS)
# Starlette reverses add_middleware order: the LAST call = OUTERMOST wrapper.
#   SafeErrorMiddleware -> RequestContext -> handler
# ------------------------------------------------------------
app.add_middleware(RequestContextMiddleware)
app.add_middleware(SafeErrorMiddleware)


app.include_router(health.router)
app.include_router(metrics_ep.router)
app.include_router(metrics_export.router)
app.include_router(models_router)
