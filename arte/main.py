import logging
import os
import time
import uuid
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from arte import access, blog, payments, ratelimit
from arte.auth import extract_client_key, require_api_key
from arte.errors import TokenError
from arte.generators import TITLES, generate_params
from arte.render import render_blog_index, render_blog_post
from arte.seed import generate_token, token_to_seed
from arte.tokens import ARTWORK_TYPES, decode_params, encode_params, is_encrypted_token


if not logging.getLogger().handlers:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

log = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or corrupted token"

ArtworkType = Literal["flow", "grid", "mosaic", "rotated", "tree", "text"]

app = FastAPI(title="arte")

allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = str(uuid.uuid4())
    start = time.time()
    request.state.request_id = rid
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        dur_ms = int((time.time() - start) * 1000)
        log.info(
            "rid=%s method=%s path=%s status=%s dur_ms=%d",
            rid,
            request.method,
            request.url.path,
            getattr(response, "status_code", "?"),
            dur_ms,
        )


class EncodeRequest(BaseModel):
    type: ArtworkType
    params: Dict[str, Any] = Field(..., description="Artwork parameters in display order")


class ExportRequest(EncodeRequest):
    email: str = Field(..., description="Email the export purchase was made with")


class DecodeRequest(BaseModel):
    token: str


class EmailRequest(BaseModel):
    email: Optional[str] = None


def _encryption_key() -> Optional[str]:
    return os.getenv("TOKEN_ENCRYPTION_KEY") or None


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "anon"


def _rate_limit_headers(remaining: int, reset_ts: int, *, limited: bool = False) -> Dict[str, str]:
    headers = {
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(reset_ts),
    }
    if limited:
        headers["Retry-After"] = str(max(0, reset_ts - int(time.time())))
    return headers


def _rate_limited(reset_ts: int, remaining: int) -> JSONResponse:
    wait_seconds = max(0, reset_ts - int(time.time()))
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate limit exceeded",
            "reset": reset_ts,
            "retry_after_seconds": wait_seconds,
            "message": f"Rate limit exceeded. Try again in {wait_seconds} seconds.",
        },
        headers=_rate_limit_headers(remaining, reset_ts, limited=True),
    )


def _invalid_email(email: Any) -> Optional[JSONResponse]:
    if not email or not isinstance(email, str):
        return JSONResponse(status_code=400, content={"error": "Email is required"})
    if not access.is_valid_email(email):
        return JSONResponse(status_code=400, content={"error": "Invalid email format"})
    return None


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/artworks")
def list_artworks() -> List[Dict[str, str]]:
    return [{"id": t, "title": TITLES[t][0], "description": TITLES[t][1]} for t in ARTWORK_TYPES]


@app.get("/api/artworks/{artwork_type}/params")
def artwork_params(artwork_type: str, token: Optional[str] = None, mobile: bool = False) -> Dict[str, Any]:
    """Parameters for ``token`` (a fresh random token when omitted)."""
    if artwork_type not in ARTWORK_TYPES:
        raise HTTPException(status_code=404, detail=f"unknown artwork type: {artwork_type}")
    seed_token = token or generate_token()
    return {"type": artwork_type, "token": seed_token, "params": generate_params(artwork_type, seed_token, mobile=mobile)}


@app.get("/api/tokens/seed")
def token_seed(token: str) -> Dict[str, int]:
    return {"seed": token_to_seed(token)}


@app.post("/api/tokens/encode")
def encode_endpoint(req: EncodeRequest) -> Dict[str, str]:
    return {"token": encode_params(req.type, req.params)}


@app.post("/api/tokens/export")
def export_endpoint(req: ExportRequest):
    """Encrypted token for gated export; the email must have purchased access."""
    bad = _invalid_email(req.email)
    if bad is not None:
        return bad
    key = _encryption_key()
    if not key:
        log.error("tokens.export: TOKEN_ENCRYPTION_KEY not configured")
        return JSONResponse(status_code=503, content={"error": "Encrypted export is not configured"})
    if not access.check(req.email):
        log.info("tokens.export: denied email=%s", access.mask_email(req.email))
        return JSONResponse(status_code=403, content={"error": "Export requires purchased access"})
    return {"token": encode_params(req.type, req.params, passphrase=key)}


@app.post("/api/tokens/decode")
def decode_endpoint(req: DecodeRequest, request: Request):
    key = _encryption_key()
    if is_encrypted_token(req.token) and not key:
        log.error("tokens.decode: encrypted token but TOKEN_ENCRYPTION_KEY not configured")
        return JSONResponse(status_code=503, content={"error": "Token decryption is not configured"})
    try:
        decoded = decode_params(req.token, passphrase=key)
    except TokenError as exc:
        log.warning(
            "tokens.decode: rejected rid=%s kind=%s err=%s",
            getattr(request.state, "request_id", None),
            exc.kind,
            exc,
        )
        return JSONResponse(status_code=400, content={"error": INVALID_TOKEN_MESSAGE})
    return {"type": decoded.type, "params": decoded.params, "encrypted": decoded.encrypted}


@app.post("/api/create-checkout")
def create_checkout_endpoint():
    try:
        checkout = payments.create_checkout()
    except payments.PaymentConfigError as exc:
        log.error("payments.checkout: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
    except payments.PaymentError as exc:
        log.exception("payments.checkout: failed")
        return JSONResponse(status_code=502, content={"error": "Checkout unavailable", "details": str(exc)})
    return {"checkoutUrl": checkout.url, "checkoutId": checkout.id}


@app.post("/api/grant-access")
def grant_access_endpoint(req: EmailRequest, api_key: Optional[str] = Depends(require_api_key)):
    bad = _invalid_email(req.email)
    if bad is not None:
        return bad
    record = access.grant(req.email)
    return {"success": True, "message": "Access granted successfully", "grantedAt": record["grantedAt"]}


@app.post("/api/verify-access")
def verify_access_endpoint(req: EmailRequest, request: Request):
    client_key = extract_client_key(None, _client_host(request))
    allowed, remaining, reset_ts = ratelimit.check_and_increment("verify", client_key)
    if not allowed:
        log.info("access.verify: rate limited client=%s", client_key)
        return _rate_limited(reset_ts, remaining)

    headers = _rate_limit_headers(remaining, reset_ts)
    if not req.email or not isinstance(req.email, str):
        return JSONResponse(status_code=400, content={"error": "Email is required"}, headers=headers)

    data = access.get_access_data(req.email)
    if data is None:
        return JSONResponse({"hasAccess": False}, headers=headers)
    return JSONResponse({"hasAccess": True, "grantedAt": data.get("grantedAt")}, headers=headers)


@app.post("/api/webhooks/polar")
async def polar_webhook(request: Request):
    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})
    if not isinstance(payload, dict):
        return JSONResponse(status_code=400, content={"error": "Invalid webhook payload"})
    try:
        result = payments.handle_webhook(payload)
    except payments.PaymentError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    body: Dict[str, Any] = {"success": True, "message": result.message, "eventType": result.event_type}
    if result.granted:
        body["email"] = result.email
    return body


@app.get("/api/blog")
def blog_index_json() -> List[Dict[str, Any]]:
    return [p.to_dict() for p in blog.get_all_posts()]


@app.get("/api/blog/{slug}")
def blog_post_json(slug: str) -> Dict[str, Any]:
    post = blog.get_post(slug)
    if post is None:
        raise HTTPException(status_code=404, detail="post not found")
    return post.to_dict()


@app.get("/blog", response_class=HTMLResponse)
def blog_index_html() -> str:
    return render_blog_index(blog.get_all_posts())


@app.get("/blog/{slug}", response_class=HTMLResponse)
def blog_post_html(slug: str):
    post = blog.get_post(slug)
    if post is None:
        raise HTTPException(status_code=404, detail="post not found")
    return HTMLResponse(render_blog_post(post))
