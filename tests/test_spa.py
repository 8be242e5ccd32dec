import pytest

from app.core.config import settings


@pytest.fixture
def dist(tmp_path, monkeypatch):
    (tmp_path / "index.html").write_text("<html>spa</html>", encoding="utf-8")
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "app.js").write_text("console.log('hi')", encoding="utf-8")
    monkeypatch.setattr(settings, "static_dir", str(tmp_path))
    return tmp_path


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_serves_index_at_root(client, dist):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "spa" in resp.text


def test_serves_existing_asset(client, dist):
    resp = client.get("/assets/app.js")
    assert resp.status_code == 200
    assert "console.log" in resp.text


def test_extensionless_path_falls_back_to_index(client, dist):
    resp = client.get("/my-restaurants/42")
    assert resp.status_code == 200
    assert "spa" in resp.text


def test_missing_asset_with_extension_is_404(client, dist):
    assert client.get("/assets/missing.js").status_code == 404


def test_without_build_serves_dev_page(client, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "static_dir", str(tmp_path / "nothing"))
    resp = client.get("/anything")
    assert resp.status_code == 200
    assert "로컬 개발 모드" in resp.text
