"""HTTP surface — POST /resize_image scenarios against both codecs."""

import base64

from fastapi.testclient import TestClient

from jpeg_resizer.config import Settings
from jpeg_resizer.main import create_app
from tests.conftest import jpeg_size, make_jpeg_b64

RESIZE_PATH = "/resize_image"


def _post(client, input_jpeg, width, height):
    return client.post(
        RESIZE_PATH,
        json={"input_jpeg": input_jpeg, "desired_width": width, "desired_height": height},
    )


def test_resize_800x600_to_400x300(client):
    r = _post(client, make_jpeg_b64(800, 600), 400, 300)
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/json"
    body = r.json()
    assert body["code"] == "200"
    assert body["message"] == "success"
    assert jpeg_size(body["output_jpeg"]) == (400, 300)


def test_negative_width_is_400(client):
    r = _post(client, make_jpeg_b64(200, 150), -100, 100)
    assert r.status_code == 400
    assert r.headers["content-type"] == "application/json"
    assert r.json()["code"] == 400
    assert "Invalid input" in r.json()["message"]


def test_empty_input_is_400(client):
    r = _post(client, "", 100, 100)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid input: Invalid or empty base64 input"


def test_non_jpeg_bytes_is_500(client):
    junk = base64.b64encode(b"\x13\x37\xca\xfe\xba\xbe").decode()
    r = _post(client, junk, 100, 100)
    assert r.status_code == 500
    assert r.headers["content-type"] == "application/json"
    assert r.json()["code"] == 500
    assert r.json()["message"].startswith("Internal server error: Failed to decode JPEG image")


def test_oversized_dimensions_are_400(client):
    r = _post(client, make_jpeg_b64(200, 150), 70000, 70000)
    assert r.status_code == 400
    assert "exceed maximum JPEG size" in r.json()["message"]


def test_unparsable_body_is_400(client):
    r = client.post(RESIZE_PATH, content=b"{oops",
                    headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json()["message"].startswith("Invalid input: ")


def test_server_keeps_serving_after_failures(client):
    assert _post(client, "AAAA", 10, 10).status_code == 500
    assert _post(client, "", 10, 10).status_code == 400
    r = _post(client, make_jpeg_b64(50, 50), 25, 10)
    assert r.status_code == 200
    assert jpeg_size(r.json()["output_jpeg"]) == (25, 10)


def test_chained_requests_keep_exact_size(client):
    first = _post(client, make_jpeg_b64(300, 200), 150, 100).json()["output_jpeg"]
    second = _post(client, first, 33, 999).json()["output_jpeg"]
    assert jpeg_size(second) == (33, 999)


def test_line_wrapped_base64_accepted(client):
    raw = base64.b64decode(make_jpeg_b64(120, 90))
    wrapped = base64.encodebytes(raw).decode()
    r = _post(client, wrapped, 60, 45)
    assert r.status_code == 200
    assert jpeg_size(r.json()["output_jpeg"]) == (60, 45)


def test_health_reports_codec(client, codec_name):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "codec": codec_name, "workers": 2}


def test_get_on_resize_route_not_allowed():
    with TestClient(create_app(Settings())) as cli:
        assert cli.get(RESIZE_PATH).status_code == 405


def test_importing_main_builds_no_app():
    import jpeg_resizer.main as main_module

    assert not hasattr(main_module, "app")
    assert callable(main_module.create_app)


def test_run_serves_through_the_factory(monkeypatch):
    import uvicorn

    import jpeg_resizer.main as main_module

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kw: calls.append((target, kw)))
    main_module.get_settings.cache_clear()
    main_module.run()

    target, kw = calls[0]
    assert target == "jpeg_resizer.main:create_app"
    assert kw["factory"] is True
    assert (kw["host"], kw["port"]) == ("0.0.0.0", 8080)
