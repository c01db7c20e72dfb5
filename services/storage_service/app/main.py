# services/storage_service/app/main.py
from fastapi import FastAPI, Request, HTTPException, Depends, File, Form, Query, UploadFile, status
from contextlib import asynccontextmanager
from typing import Optional
import asyncio
import logging
import os
import shutil
import tempfile

from core.models import CopyRequest, StorageErrorKind, StorageResponse, StorageResult
from core.storage import ObjectStore

# Use logger configured in core.config
logger = logging.getLogger("ObjectStore_Core").getChild("StorageService")

ERROR_STATUS_CODES = {
    StorageErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    StorageErrorKind.AUTH_FAILURE: status.HTTP_502_BAD_GATEWAY,
    StorageErrorKind.NETWORK_ERROR: status.HTTP_504_GATEWAY_TIMEOUT,
    StorageErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: build the store once and keep it in app.state
    logger.info("Storage Service lifespan startup: Initializing ObjectStore.")
    try:
        app.state.object_store = ObjectStore.from_settings()
    except Exception as e:
        logger.error(f"Failed to initialize ObjectStore during startup: {e}", exc_info=True)
        # Let the service start; storage routes answer 503 until configured.
        app.state.object_store = None

    yield # Application runs here

    logger.info("Storage Service lifespan shutdown.")
    app.state.object_store = None


app = FastAPI(
    title="Object Storage Service",
    description="Bucket-scoped upload, delete, existence and copy operations over S3.",
    version="1.0.0",
    lifespan=lifespan
)


# --- Dependencies ---
def get_object_store(request: Request) -> ObjectStore:
    store = getattr(request.app.state, "object_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Object store is not configured")
    return store


def raise_for_failure(result: StorageResult, action: str):
    if result.ok:
        return
    kind = result.error or StorageErrorKind.UNKNOWN
    logger.warning(f"{action} failed [{kind.value}]: {result.message}")
    raise HTTPException(status_code=ERROR_STATUS_CODES[kind], detail=f"{action} failed: {result.message}")


# --- Health Check ---
@app.get("/health", response_model=StorageResponse, tags=["Meta"])
async def health_check(request: Request):
    store = getattr(request.app.state, "object_store", None)
    return StorageResponse(
        status="success",
        data={
            "object_store": "configured" if store else "not_configured",
            "default_bucket": store.default_bucket if store else None,
        },
        message="Storage Service is running",
    )


# --- Storage Routes ---
# boto3 calls block, so each runs in a worker thread
@app.post("/files/upload", response_model=StorageResponse, status_code=201, tags=["Files"])
async def upload_file(
    file: UploadFile = File(...),
    remote_key: str = Form(...),
    bucket: Optional[str] = Form(None),
    store: ObjectStore = Depends(get_object_store),
):
    # Only bytes sent by the caller are uploaded; nothing is read from the host filesystem
    if not remote_key.strip():
        raise HTTPException(status_code=422, detail="remote_key must not be blank")

    suffix = os.path.splitext(file.filename or "")[1]
    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as spooled:
        shutil.copyfileobj(file.file, spooled)
        spooled_path = spooled.name
    try:
        result = await asyncio.to_thread(store.upload, spooled_path, remote_key, bucket)
    finally:
        os.remove(spooled_path)

    raise_for_failure(result, "Upload")
    return StorageResponse(status="success", data={"url": result.value, "key": remote_key})


@app.delete("/files", response_model=StorageResponse, tags=["Files"])
async def delete_file(
    key: str = Query(..., min_length=1),
    bucket: Optional[str] = None,
    store: ObjectStore = Depends(get_object_store),
):
    result = await asyncio.to_thread(store.delete, key, bucket)
    raise_for_failure(result, "Delete")
    if not result.value:
        raise HTTPException(status_code=409, detail=f"Object '{key}' still exists after delete")
    return StorageResponse(status="success", data={"deleted": True, "key": key})


@app.get("/files/exists", response_model=StorageResponse, tags=["Files"])
async def file_exists(
    key: str = Query(..., min_length=1),
    bucket: Optional[str] = None,
    store: ObjectStore = Depends(get_object_store),
):
    result = await asyncio.to_thread(store.check_exists, key, bucket)
    raise_for_failure(result, "Existence check")
    return StorageResponse(status="success", data={"exists": bool(result.value), "key": key})


@app.post("/files/copy", response_model=StorageResponse, tags=["Files"])
async def copy_file(payload: CopyRequest, store: ObjectStore = Depends(get_object_store)):
    result = await asyncio.to_thread(store.copy, payload.from_key, payload.to_key, payload.bucket)
    raise_for_failure(result, "Copy")
    if not result.value:
        raise HTTPException(status_code=409, detail=f"Copy destination '{payload.to_key}' not found after copy")
    return StorageResponse(status="success", data={"copied": True, "from_key": payload.from_key, "to_key": payload.to_key})
