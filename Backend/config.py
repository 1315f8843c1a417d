from dotenv import load_dotenv
import os

from app_utils.constants import DEFAULT_ALGORITHM, DEFAULT_HASH_SIZE, DEFAULT_MATCH_THRESHOLD
from app_utils.hash_algorithms import parse_algorithm

# ✅ LOAD ENV FIRST
load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# S3 source bucket, checked when an object is actually fetched
BUCKET_NAME = os.getenv("BUCKET_NAME")
AWS_REGION = os.getenv("AWS_REGION")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL")


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        value = None
    if value is None or value < minimum:
        raise RuntimeError(
            f"{name} must be an integer >= {minimum}, got {raw!r}.\n"
            f"Example: {name}={default}"
        )
    return value


HASH_SIZE = _int_env("HASH_SIZE", DEFAULT_HASH_SIZE, minimum=2)
HASH_MATCH_THRESHOLD = _int_env("HASH_MATCH_THRESHOLD", DEFAULT_MATCH_THRESHOLD, minimum=0)

# Applied at the request boundary when no algorithm is given
DEFAULT_HASH_ALGO = parse_algorithm(os.getenv("DEFAULT_HASH_ALGO"), default=DEFAULT_ALGORITHM)


def get_hash_size():
    return HASH_SIZE, HASH_SIZE
