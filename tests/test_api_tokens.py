import re

from fastapi.testclient import TestClient

from arte import access
from arte.compression import compress
from arte.fingerprint import fingerprint
from arte.main import app
from arte.tokens import assemble, encode_params

client = TestClient(app)

PARAMS = {"canvasWidth": 630, "color1": "#A8DADC"}


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_encode_then_decode():
    r = client.post("/api/tokens/encode", json={"type": "mosaic", "params": PARAMS})
    assert r.status_code == 200
    token = r.json()["token"]
    assert re.fullmatch(r"fx-mosaic-v2\.[a-f0-9]{16}\.[A-Za-z0-9_-]+", token)

    r = client.post("/api/tokens/decode", json={"token": token})
    assert r.status_code == 200
    assert r.json() == {"type": "mosaic", "params": PARAMS, "encrypted": False}


def test_encode_rejects_unknown_type():
    r = client.post("/api/tokens/encode", json={"type": "bogus", "params": PARAMS})
    assert r.status_code == 422


def test_decode_failures_share_one_message():
    token = encode_params("grid", PARAMS)
    head, digest, payload = token.split(".")
    tampered = f"{head}.{'0' if digest[0] != '0' else '1'}{digest[1:]}.{payload}"
    for bad in ("not-a-token", "fx-bogus-v2.abc.xyz", tampered):
        r = client.post("/api/tokens/decode", json={"token": bad})
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid or corrupted token"}


def test_seed_endpoint():
    r = client.get("/api/tokens/seed", params={"token": "abc"})
    assert r.status_code == 200
    assert r.json() == {"seed": 96354}


def test_export_requires_configured_key(monkeypatch):
    monkeypatch.delenv("TOKEN_ENCRYPTION_KEY", raising=False)
    access.grant("buyer@example.com")
    r = client.post("/api/tokens/export", json={"type": "flow", "params": PARAMS, "email": "buyer@example.com"})
    assert r.status_code == 503


def test_export_requires_access(monkeypatch):
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", "server-key")
    r = client.post("/api/tokens/export", json={"type": "flow", "params": PARAMS, "email": "nobody@example.com"})
    assert r.status_code == 403


def test_export_rejects_bad_email(monkeypatch):
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", "server-key")
    r = client.post("/api/tokens/export", json={"type": "flow", "params": PARAMS, "email": "not-an-email"})
    assert r.status_code == 400


def test_export_and_decode_encrypted(monkeypatch):
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", "server-key")
    access.grant("Buyer@Example.com ")
    r = client.post("/api/tokens/export", json={"type": "tree", "params": PARAMS, "email": "buyer@example.com"})
    assert r.status_code == 200
    token = r.json()["token"]
    assert token.startswith("fx-tree-v2e.")

    r = client.post("/api/tokens/decode", json={"token": token})
    assert r.status_code == 200
    assert r.json() == {"type": "tree", "params": PARAMS, "encrypted": True}

    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", "rotated-key")
    r = client.post("/api/tokens/decode", json={"token": token})
    assert r.status_code == 400


def test_decode_encrypted_without_key(monkeypatch):
    token = encode_params("tree", PARAMS, passphrase="server-key")
    monkeypatch.delenv("TOKEN_ENCRYPTION_KEY", raising=False)
    r = client.post("/api/tokens/decode", json={"token": token})
    assert r.status_code == 503


def test_artwork_listing_and_params():
    r = client.get("/api/artworks")
    assert r.status_code == 200
    assert [a["id"] for a in r.json()] == ["flow", "grid", "mosaic", "rotated", "tree", "text"]

    r1 = client.get("/api/artworks/grid/params", params={"token": "fx-fixed"})
    r2 = client.get("/api/artworks/grid/params", params={"token": "fx-fixed"})
    assert r1.status_code == 200
    assert r1.json() == r2.json()
    assert r1.json()["params"]["token"] == "fx-fixed"

    r = client.get("/api/artworks/grid/params")
    assert r.json()["token"].startswith("fx-")

    assert client.get("/api/artworks/lamb/params").status_code == 404


def test_malformed_token_mentioning_v2e_is_not_a_config_error(monkeypatch):
    monkeypatch.delenv("TOKEN_ENCRYPTION_KEY", raising=False)
    r = client.post("/api/tokens/decode", json={"token": "junk-v2e.zz"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid or corrupted token"}


def test_forged_and_corrupt_plain_tokens_are_rejected():
    forged = '{"a":Infinity}'
    tokens = [
        assemble("grid", False, compress(forged), fingerprint(forged)),
        "fx-grid-v2.0123456789abcdef.2Ymk_yE9fz1WuvL4NUyv-D",
    ]
    for token in tokens:
        r = client.post("/api/tokens/decode", json={"token": token})
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid or corrupted token"}
