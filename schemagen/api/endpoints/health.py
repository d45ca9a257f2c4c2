from __future__ import annotations

from fastapi import APIRouter
from starlette.responses import JSONResponse

from schemagen.core.config import current_env
from schemagen.core.generators.emitter import TEMPLATES_DIR
from schemagen.core.generators.dialects import DIALECTS
from schemagen.core.observability.metrics import inc_named

router = APIRouter()


# ------------------------------------------------------------
# Unversioned health
# ------------------------------------------------------------
@router.get("/health/live")
async def live():
    inc_named("health_live")
    return {"status": "ok"}


# ------------------------------------------------------------
# Versioned health
# ------------------------------------------------------------
@router.get("/api/v1/health/live")
def liveness():
    inc_named("health_live")
    return {"status": "alive"}


@router.get("/api/v1/health/ready")
def readiness():
    """
    Ready when every registered dialect has its template on disk.
    """
    inc_named("health_ready")

    problems: list[str] = []
    for name, dialect in sorted(DIALECTS.items()):
        if not (TEMPLATES_DIR / dialect.template).is_file():
            problems.append(f"missing_template:{name}={dialect.template}")

    if problems:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "problems": problems, "env": current_env()},
        )

    return {"status": "ready", "env": current_env()}
