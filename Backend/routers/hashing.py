from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Form, Header
from typing import Optional
import logging

from starlette.concurrency import run_in_threadpool

from app_utils.errors import DecodeError, FetchError, HashMismatchError, PipelineError, UnsupportedAlgorithm
from schemas import AlgorithmListResponse, CompareRequest, CompareResponse, HashRequest, HashResponse
from services.hash_service import (
    compare_hashes,
    hash_image_bytes,
    hash_object_workflow,
    list_algorithms,
    new_request_id,
    resolve_algorithm,
)
from services.object_store import get_object_fetcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hash", tags=["Perceptual Hash"])


def _http_error(e: PipelineError, request_id: Optional[str] = None) -> HTTPException:
    """Map a pipeline failure to an HTTP error, keeping stage + reason."""
    if isinstance(e, FetchError):
        status_code = 404 if e.not_found else 502
    elif isinstance(e, DecodeError):
        status_code = 422
    elif isinstance(e, (UnsupportedAlgorithm, HashMismatchError)):
        status_code = 400
    else:
        status_code = 500

    if status_code < 500:
        logger.warning("request rejected: req_id=%s stage=%s reason=%s", request_id, e.stage, e.reason)
    detail = e.to_detail()
    if request_id:
        detail["request_id"] = request_id
    return HTTPException(status_code=status_code, detail=detail)


# ==================================================
# HASH AN OBJECT FROM THE BUCKET
# ==================================================
@router.post("/", response_model=HashResponse)
async def hash_object(
    request: HashRequest,
    x_request_id: Optional[str] = Header(None),
    fetcher=Depends(get_object_fetcher),
):
    """
    Fetch `path` from S3 and return its perceptual hash.
    - `algo` is case-insensitive and defaults to Gradient.
    - `time_elapsed` measures the hash transform only.
    """
    request_id = x_request_id or new_request_id()
    try:
        return await hash_object_workflow(fetcher, request, request_id)
    except PipelineError as e:
        raise _http_error(e, request_id)


# ==================================================
# HASH AN UPLOADED IMAGE
# ==================================================
@router.post("/upload", response_model=HashResponse)
async def hash_upload(
    algo: Optional[str] = Form(None, description="Hash algorithm, e.g. gradient, mean, dct"),
    file: UploadFile = File(...),
    x_request_id: Optional[str] = Header(None),
):
    request_id = x_request_id or new_request_id()
    try:
        algorithm = resolve_algorithm(algo)
    except PipelineError as e:
        raise _http_error(e, request_id)

    # Read image bytes, an empty upload fails in the decode stage
    image_bytes = await file.read()

    try:
        return await run_in_threadpool(hash_image_bytes, image_bytes, algorithm, request_id)
    except PipelineError as e:
        raise _http_error(e, request_id)


# ==================================================
# COMPARE TWO HASHES
# ==================================================
@router.post("/compare", response_model=CompareResponse)
async def compare(request: CompareRequest):
    """Hamming distance between two hashes of the same algorithm."""
    try:
        return compare_hashes(request)
    except PipelineError as e:
        raise _http_error(e)


@router.get("/algorithms", response_model=AlgorithmListResponse)
async def algorithms():
    return list_algorithms()
