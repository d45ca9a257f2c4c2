from fastapi import APIRouter

from schemagen.core.observability.metrics import snapshot_named, snapshot_requests

router = APIRouter()


def _render():
    req = snapshot_requests()
    body = {"requests": req}
    body.update(snapshot_named())

    for k in ("requests_total", "requests_GET", "requests_POST"):
        if k in req:
            body[k] = req[k]

    return body


@router.get("/api/v1/metrics/snapshot")
def metrics_snapshot_v1():
    return _render()
