import time
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError

from config.settings import GCP_PROJECT_ID, GCP_ZONE, METRICS_ENABLED
from core.logger import log_error, log_event
from core.metrics import (
    REQUEST_COUNT,
    REQUEST_LATENCY,
    init_static_metrics,
    observe_provision_duration,
    record_provision_failure,
    record_vm_provisioned,
)
from core.secret_store import SecretStore
from core.transcript import SETUP_TRANSCRIPT
from core.vm_controller import VMController
from schemas.vm_schema import ProvisionErrorResponse, ProvisionRequest

UNKNOWN_ERROR = "Unknown error occurred"


@lru_cache(maxsize=None)
def get_vm_controller() -> VMController:
    return VMController()


@lru_cache(maxsize=None)
def get_secret_store() -> SecretStore:
    return SecretStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Provider clients are process-wide and built once at startup
    get_vm_controller()
    get_secret_store()
    log_event(f"[app] Provider clients ready (project={GCP_PROJECT_ID}, zone={GCP_ZONE})")
    if METRICS_ENABLED:
        init_static_metrics()
        log_event("[app] Metrics enabled")
    yield


app = FastAPI(
    title="Lab VM Provisioner",
    description=(
        "Provision a spot Compute Engine VM for a lab session.\n\n"
        "POST / with {sessionId, osType, userId}; the response is a fixed\n"
        "shell transcript for setting up Guacamole on the new machine."
    ),
    version="1.0.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    endpoint = request.url.path
    method = request.method

    if not METRICS_ENABLED or endpoint == "/metrics":
        return await call_next(request)

    start_time = time.time()
    try:
        response = await call_next(request)
        return response
    finally:
        duration = time.time() - start_time
        REQUEST_COUNT.labels(method=method, endpoint=endpoint).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)


async def _read_json_object(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        # empty or non-JSON body
        return {}
    return body if isinstance(body, dict) else {}


@app.post("/", tags=["Provisioning"])
async def provision_vm(
    request: Request,
    vm_controller: VMController = Depends(get_vm_controller),
):
    body = await _read_json_object(request)
    try:
        payload = ProvisionRequest.model_validate(body)
    except ValidationError as e:
        log_event(f"[provision] Rejected malformed request: {e.error_count()} error(s)")
        record_provision_failure("validation")
        return PlainTextResponse("Missing required parameters", status_code=400)

    missing = payload.missing_fields()
    if missing:
        log_event(f"[provision] Rejected request, missing: {', '.join(missing)}")
        record_provision_failure("validation")
        return PlainTextResponse("Missing required parameters", status_code=400)

    start_time = time.time()
    try:
        vm_info = await run_in_threadpool(
            vm_controller.provision,
            session_id=payload.sessionId,
            os_type=payload.osType,
            user_id=payload.userId,
        )
    except Exception as e:  # noqa: BLE001
        log_error(f"[provision] Error provisioning VM for session={payload.sessionId}: {e}", e)
        record_provision_failure("provider")
        content = ProvisionErrorResponse(error=str(e) or UNKNOWN_ERROR)
        return JSONResponse(status_code=500, content=content.model_dump())

    observe_provision_duration(time.time() - start_time)
    record_vm_provisioned(payload.osType, payload.userId)
    log_event(
        f"[provision] VM '{vm_info['name']}' ready at {vm_info['external_ip']} "
        f"(session={payload.sessionId}, user={payload.userId})"
    )
    return PlainTextResponse(SETUP_TRANSCRIPT, status_code=200)


@app.api_route(
    "/",
    methods=["GET", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def provision_vm_wrong_method(request: Request):
    record_provision_failure("method")
    return PlainTextResponse("Method Not Allowed", status_code=405)


@app.get("/healthz", tags=["System"])
def healthz():
    return {"status": "ok", "version": app.version}


@app.get("/metrics", tags=["Monitoring"])
def metrics():
    if not METRICS_ENABLED:
        raise HTTPException(status_code=404, detail="Metrics disabled")
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
