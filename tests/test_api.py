import pytest
from fastapi.testclient import TestClient

from app_utils.errors import FetchError
import routers.hashing as hashing
from main import app
from services.object_store import get_object_fetcher


class FakeFetcher:
    def __init__(self, objects):
        self.objects = objects
        self.calls = []

    def fetch(self, key):
        self.calls.append(key)
        if key not in self.objects:
            raise FetchError(key, "failed to retrieve from S3 (NoSuchKey)", not_found=True)
        return self.objects[key]


@pytest.fixture
def fetcher(red_png, wave_png):
    return FakeFetcher({
        "images/red.png": red_png,
        "images/wave.png": wave_png,
        "images/broken.png": b"\x89PNG\r\n\x1a\n broken",
    })


@pytest.fixture
def client(fetcher):
    app.dependency_overrides[get_object_fetcher] = lambda: fetcher
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_hash_object_defaults_to_gradient(client):
    resp = client.post("/api/hash/", json={"path": "images/wave.png"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["algo"] == "Gradient"
    assert body["image_size"] == [256, 256]
    assert body["time_elapsed"] >= 0
    assert body["request_id"]
    assert len(body["hash_hex"]) == 16


def test_hash_object_algo_case_insensitive(client):
    first = client.post("/api/hash/", json={"path": "images/wave.png", "algo": "dct"}).json()
    second = client.post("/api/hash/", json={"path": "images/wave.png", "algo": "DCT"}).json()
    assert first["algo"] == second["algo"] == "DCT"
    assert first["hash_base64"] == second["hash_base64"]


def test_hash_object_keeps_request_id(client):
    resp = client.post(
        "/api/hash/",
        json={"path": "images/red.png", "algo": "mean"},
        headers={"X-Request-ID": "req-123"},
    )
    assert resp.status_code == 200
    assert resp.json()["request_id"] == "req-123"


def test_unsupported_algorithm_is_rejected_before_fetch(client, fetcher):
    resp = client.post("/api/hash/", json={"path": "images/wave.png", "algo": "not-a-real-algo"})
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["stage"] == "request"
    assert "not-a-real-algo" in detail["reason"]
    assert fetcher.calls == []


def test_missing_object(client):
    resp = client.post("/api/hash/", json={"path": "images/missing.png"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["stage"] == "fetch"


def test_fetch_failure_is_bad_gateway(client, fetcher):
    def broken_fetch(key):
        raise FetchError(key, "failed to download from S3: connection reset")

    fetcher.fetch = broken_fetch
    resp = client.post("/api/hash/", json={"path": "images/wave.png"})
    assert resp.status_code == 502


def test_corrupt_object(client):
    resp = client.post("/api/hash/", json={"path": "images/broken.png"})
    assert resp.status_code == 422
    assert resp.json()["detail"]["stage"] == "decode"


def test_upload(client, red_png):
    resp = client.post(
        "/api/hash/upload",
        data={"algo": "blockhash"},
        files={"file": ("red.png", red_png, "image/png")},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["algo"] == "Blockhash"
    assert body["image_size"] == [100, 100]


def test_upload_empty_file(client):
    resp = client.post("/api/hash/upload", files={"file": ("empty.png", b"", "image/png")})
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["stage"] == "decode"
    assert "empty" in detail["reason"]


def test_upload_not_an_image(client):
    resp = client.post("/api/hash/upload", files={"file": ("notes.txt", b"hello world", "text/plain")})
    assert resp.status_code == 422


def test_compare_same_hash(client, wave_png):
    hashed = client.post(
        "/api/hash/upload",
        data={"algo": "gradient"},
        files={"file": ("wave.png", wave_png, "image/png")},
    ).json()

    resp = client.post("/api/hash/compare", json={
        "hash_a": hashed["hash_base64"],
        "hash_b": hashed["hash_base64"],
        "algo": "gradient",
    })
    assert resp.status_code == 200
    assert resp.json() == {"algo": "Gradient", "distance": 0, "bit_length": 64, "similar": True}


def test_compare_threshold(client):
    resp = client.post("/api/hash/compare", json={
        "hash_a": "AAAAAAAAAAA=",
        "hash_b": "DwAAAAAAAAA=",
        "algo": "mean",
        "threshold": 3,
    })
    assert resp.status_code == 200
    assert resp.json()["distance"] == 4
    assert resp.json()["similar"] is False


def test_compare_rejects_other_algorithm_lengths(client, wave_png):
    hashed = client.post(
        "/api/hash/upload",
        data={"algo": "doublegradient"},
        files={"file": ("wave.png", wave_png, "image/png")},
    ).json()

    resp = client.post("/api/hash/compare", json={
        "hash_a": hashed["hash_base64"],
        "hash_b": hashed["hash_base64"],
        "algo": "gradient",
    })
    assert resp.status_code == 400
    assert resp.json()["detail"]["stage"] == "compare"


def test_list_algorithms(client):
    resp = client.get("/api/hash/algorithms")
    assert resp.status_code == 200
    body = resp.json()
    assert body["default"] == "Gradient"
    names = {algo["name"]: algo for algo in body["algorithms"]}
    assert len(names) == 8
    assert names["DoubleGradient"]["bit_length"] == 40
    assert names["Gradient"]["working_size"] == [9, 8]


def test_upload_hashes_in_threadpool(client, red_png, monkeypatch):
    offloaded = []
    original = hashing.run_in_threadpool

    async def recording_threadpool(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return await original(func, *args, **kwargs)

    monkeypatch.setattr(hashing, "run_in_threadpool", recording_threadpool)
    resp = client.post("/api/hash/upload", files={"file": ("red.png", red_png, "image/png")})
    assert resp.status_code == 200
    assert offloaded == ["hash_image_bytes"]
