def test_upload_and_download(client, model_storage):
    storage = model_storage

    resp = client.post(
        "/api/upload-model",
        files={"model": ("국밥집.spz", b"splat-bytes", "application/octet-stream")},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["originalName"] == "국밥집.spz"
    assert body["size"] == len(b"splat-bytes")
    assert body["fileName"].endswith("_국밥집.spz")
    assert body["fileName"].split("_", 1)[0].isdigit()
    assert body["fileUrl"] == f"/api/models/{body['fileName']}"
    stored, metadata = storage.objects[body["fileName"]]
    assert stored == b"splat-bytes"
    assert metadata["originalName"] == "국밥집.spz"

    resp = client.get(body["fileUrl"])
    assert resp.status_code == 200
    assert resp.content == b"splat-bytes"
    assert resp.headers["content-type"] == "application/octet-stream"
    assert resp.headers["content-disposition"].startswith("attachment; filename*=UTF-8''")
    assert "%EA%B5%AD%EB%B0%A5" in resp.headers["content-disposition"]


def test_upload_rejects_wrong_extension(client, model_storage):
    resp = client.post("/api/upload-model", files={"model": ("scene.ply", b"x", "application/octet-stream")})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Only SPZ files are allowed"


def test_upload_rejects_oversize(client, model_storage, monkeypatch):
    from app.core.config import settings

    storage = model_storage
    monkeypatch.setattr(settings, "max_model_size", 8)
    resp = client.post("/api/upload-model", files={"model": ("big.spz", b"123456789", "application/octet-stream")})
    assert resp.status_code == 413
    assert storage.objects == {}


def test_upload_without_file(client, model_storage):
    resp = client.post("/api/upload-model", data={"other": "field"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "No file provided"


def test_download_missing(client, model_storage):
    resp = client.get("/api/models/none.spz")
    assert resp.status_code == 404
    assert resp.json()["error"] == "File not found"
