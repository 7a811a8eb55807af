import asyncio
import logging
import threading

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from recut_api.core import config
from recut_api.core.errors import TrimCancelled, TrimError
from recut_api.schemas.trim import ProcessRequest, ProcessResponse, TrimRequest
from recut_api.services.admission import TrimSlots
from recut_api.services.job import Runner
from recut_api.services.runner import run_external_tool
from recut_api.services.suggestions import suggest_clips
from recut_api.services.trim import trim

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# nginx convention for "client closed request"
STATUS_CLIENT_CLOSED = 499


app = FastAPI(
    title="RECUT API",
    version="1.0.0"
)

slots = TrimSlots()


def get_tool_runner() -> Runner:
    return run_external_tool


@app.exception_handler(RequestValidationError)
async def invalid_payload(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected {request.url.path} payload: {exc.errors()}")
    return JSONResponse({"error": "invalid payload"}, status_code=400)


# =========================
# ENDPOINTS
# =========================

@app.get("/trim")
def trim_health():
    return {"ok": True}


@app.post("/trim")
async def api_trim(req: TrimRequest, request: Request, runner: Runner = Depends(get_tool_runner)):
    if not slots.try_acquire():
        return JSONResponse({"error": "Busy"}, status_code=503)

    cancel = threading.Event()
    try:
        task = asyncio.ensure_future(
            run_in_threadpool(trim, req.url, req.start, req.end, cancel, runner)
        )

        # the pipeline blocks on subprocesses; watch the client meanwhile
        while True:
            done, _ = await asyncio.wait({task}, timeout=config.DISCONNECT_POLL_INTERVAL)
            if done:
                break
            if not cancel.is_set() and await request.is_disconnected():
                logger.warning(f"Client disconnected, cancelling trim of {req.url}")
                cancel.set()

        clip = task.result()

    except TrimCancelled:
        return Response(status_code=STATUS_CLIENT_CLOSED)
    except TrimError as e:
        logger.error(f"Trim failed: {e.kind} {e.detail or ''}")
        return JSONResponse(e.to_body(), status_code=e.status_code)
    except Exception:
        logger.exception(f"Unexpected error trimming {req.url}")
        return JSONResponse({"error": "InternalError"}, status_code=500)
    finally:
        slots.release()

    return Response(
        content=clip.data,
        media_type=clip.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{clip.filename}"'},
    )


@app.post("/process", response_model=ProcessResponse)
def api_process(req: ProcessRequest):
    return {"clips": suggest_clips(req.url)}
