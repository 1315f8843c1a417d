"""
Hash Request Workflow
Envelope in -> (fetch) -> hash pipeline -> envelope out.
The default algorithm is applied here, the pipeline itself is strictly typed.
"""
import logging
import uuid
from typing import Optional

from starlette.concurrency import run_in_threadpool

import config
from app_utils.hash_algorithms import HashAlgorithm, parse_algorithm
from app_utils.image_hash import HashResult, compare_image_hashes, compute_image_hash
from schemas import (
    AlgorithmInfo,
    AlgorithmListResponse,
    CompareRequest,
    CompareResponse,
    HashRequest,
    HashResponse,
)

logger = logging.getLogger(__name__)


def new_request_id() -> str:
    return uuid.uuid4().hex


def resolve_algorithm(selector: Optional[str]) -> HashAlgorithm:
    return parse_algorithm(selector, default=config.DEFAULT_HASH_ALGO.value)


def build_response(result: HashResult, request_id: str) -> HashResponse:
    return HashResponse(
        request_id=request_id,
        hash_base64=result.hash_base64,
        hash_hex=result.hash_hex,
        algo=result.algo.value,
        image_size=result.image_size,
        time_elapsed=result.time_elapsed,
    )


def hash_image_bytes(image_bytes: bytes, algo: HashAlgorithm, request_id: str) -> HashResponse:
    result = compute_image_hash(image_bytes, algo=algo, hash_size=config.get_hash_size())
    logger.info(
        "hash computed: req_id=%s algo=%s size=%sx%s elapsed=%.6fs",
        request_id, result.algo.value, result.image_size[0], result.image_size[1], result.time_elapsed,
    )
    return build_response(result, request_id)


async def hash_object_workflow(fetcher, request: HashRequest, request_id: str) -> HashResponse:
    """
    Handle a hash request for an object in the store.
    1. Resolve the algorithm (fails before any download).
    2. Fetch the bytes; the only blocking I/O of the request.
    3. Run the pipeline.
    """
    logger.info("handling a request: req_id=%s key=%s algo=%s", request_id, request.path, request.algo)

    algo = resolve_algorithm(request.algo)
    image_bytes = await run_in_threadpool(fetcher.fetch, request.path)
    # CPU bound, kept off the event loop
    return await run_in_threadpool(hash_image_bytes, image_bytes, algo, request_id)


def compare_hashes(request: CompareRequest) -> CompareResponse:
    algo = resolve_algorithm(request.algo)
    hash_size = config.get_hash_size()
    threshold = config.HASH_MATCH_THRESHOLD if request.threshold is None else request.threshold

    distance = compare_image_hashes(request.hash_a, request.hash_b, algo, hash_size)
    return CompareResponse(
        algo=algo.value,
        distance=distance,
        bit_length=algo.bit_length(hash_size),
        similar=distance <= threshold,
    )


def list_algorithms() -> AlgorithmListResponse:
    hash_size = config.get_hash_size()
    return AlgorithmListResponse(
        hash_size=config.HASH_SIZE,
        default=config.DEFAULT_HASH_ALGO.value,
        algorithms=[
            AlgorithmInfo(
                name=algo.value,
                working_size=algo.working_size(hash_size),
                bit_length=algo.bit_length(hash_size),
            )
            for algo in HashAlgorithm
        ],
    )
