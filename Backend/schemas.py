from pydantic import BaseModel
from typing import List, Optional, Tuple


# Perceptual Hash Schemas
class HashRequest(BaseModel):
    path: str                 # ✅ REQUIRED, object key in the bucket
    algo: Optional[str] = None  # case-insensitive, defaults to Gradient


class HashResponse(BaseModel):
    request_id: str
    hash_base64: str
    hash_hex: str
    algo: str
    image_size: Tuple[int, int]  # (width, height)
    time_elapsed: float          # seconds, transform step only


class CompareRequest(BaseModel):
    hash_a: str
    hash_b: str
    algo: Optional[str] = None
    threshold: Optional[int] = None


class CompareResponse(BaseModel):
    algo: str
    distance: int
    bit_length: int
    similar: bool


class AlgorithmInfo(BaseModel):
    name: str
    working_size: Tuple[int, int]  # (width, height)
    bit_length: int


class AlgorithmListResponse(BaseModel):
    hash_size: int
    default: str
    algorithms: List[AlgorithmInfo]
