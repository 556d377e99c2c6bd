import asyncio
import json
import logging
import os
import time
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, WebSocket, WebSocketDisconnect, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware

from core.server import ProjectsMCPServer, SERVER_NAME, SERVER_VERSION
from observability.metrics import CONTENT_TYPE_LATEST, metrics_payload_bytes
from utils import env_flag

logger = logging.getLogger(__name__)

# Config (enable flag and rate limits are read per app; token is read per request so tests can monkeypatch env)
REMOTE_BIND = os.getenv("REMOTE_BIND", "127.0.0.1:8787")
MAX_BUCKETS = 1024
BUCKET_IDLE_SECONDS = 300.0


def _remote_enabled() -> bool:
    return env_flag("REMOTE_ENABLED", "false")


def _get_remote_token() -> str:
    return os.getenv("MCP_REMOTE_TOKEN", "").strip()


# Simple token-bucket rate limiter per client key (token or IP)
class TokenBucket:
    def __init__(self, rate: float, burst: int):
        self.rate = rate
        self.capacity = burst
        self.tokens = burst
        self.timestamp = time.monotonic()

    def allow(self) -> bool:
        now = time.monotonic()
        elapsed = now - self.timestamp
        self.timestamp = now
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False


def _prune_buckets(buckets: dict, max_size: int = MAX_BUCKETS, idle_seconds: float = BUCKET_IDLE_SECONDS) -> None:
    """Keep the per-client bucket map bounded: drop idle clients, then the least recently seen."""
    if len(buckets) < max_size:
        return
    now = time.monotonic()
    for key in [k for k, b in buckets.items() if now - b.timestamp > idle_seconds]:
        del buckets[key]
    if len(buckets) >= max_size:
        by_age = sorted(buckets, key=lambda k: buckets[k].timestamp)
        for key in by_age[: len(buckets) - max_size + 1]:
            del buckets[key]


def _client_key(request: Request, authorization: Optional[str]) -> str:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1]
    # Fallback to client IP
    return request.client.host if request.client else "unknown"


def _check_auth(authorization: Optional[str]):
    token_env = _get_remote_token()
    if token_env:
        if not authorization or not authorization.startswith("Bearer "):
            raise HTTPException(status_code=401, detail="Unauthorized: Missing Bearer token")
        token = authorization.split(" ", 1)[1]
        if token != token_env:
            raise HTTPException(status_code=401, detail="Unauthorized: Invalid token")


def create_app(mcp: Optional[ProjectsMCPServer] = None) -> FastAPI:
    """Build the HTTP/WebSocket front end around one dispatcher instance."""
    mcp = mcp if mcp is not None else ProjectsMCPServer()
    rate = float(os.getenv("RATE_LIMIT_RPS", "10"))
    burst = int(os.getenv("RATE_LIMIT_BURST", "20"))
    buckets = {}

    app = FastAPI(title="Projects MCP Remote Server", version=SERVER_VERSION)
    app.state.mcp = mcp

    # Basic CORS (can be tightened as needed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"]
    )

    def _rate_limit(request: Request, authorization: Optional[str]):
        key = _client_key(request, authorization)
        bucket = buckets.get(key)
        if bucket is None:
            _prune_buckets(buckets)
            bucket = TokenBucket(rate, burst)
            buckets[key] = bucket
        if not bucket.allow():
            raise HTTPException(status_code=429, detail="Rate limit exceeded")

    @app.post("/rpc")
    async def rpc_endpoint(payload: dict, request: Request, authorization: Optional[str] = Header(None)):
        if not _remote_enabled():
            raise HTTPException(status_code=403, detail="Remote access disabled")
        _check_auth(authorization)
        _rate_limit(request, authorization)

        response = await mcp.handle_message(payload)
        if response is None:
            # Notifications carry no reply
            return Response(status_code=202)
        return JSONResponse(response)

    @app.get("/metrics")
    async def metrics_endpoint(authorization: Optional[str] = Header(None)):
        if not _remote_enabled():
            raise HTTPException(status_code=403, detail="Remote access disabled")
        _check_auth(authorization)
        return Response(content=metrics_payload_bytes(), media_type=CONTENT_TYPE_LATEST)

    @app.websocket("/ws")
    async def ws_endpoint(ws: WebSocket):
        if not _remote_enabled():
            await ws.close(code=4403)
            return
        # Auth during upgrade via query param 'token'
        token_env = _get_remote_token()
        if token_env and ws.query_params.get("token") != token_env:
            await ws.close(code=4401)
            return
        await ws.accept()
        # per-connection rate limiter
        bucket = TokenBucket(rate, burst)
        try:
            while True:
                data = await ws.receive_text()
                if not bucket.allow():
                    await ws.send_text(json.dumps({"jsonrpc": "2.0", "id": None, "error": {"code": 429, "message": "Rate limit exceeded"}}))
                    continue
                try:
                    payload = json.loads(data)
                except ValueError:
                    await ws.send_text(json.dumps({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}))
                    continue
                if not isinstance(payload, dict):
                    await ws.send_text(json.dumps({"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Invalid Request"}}))
                    continue
                response = await mcp.handle_message(payload)
                if response is not None:
                    await ws.send_text(json.dumps(response))
        except WebSocketDisconnect:
            logger.debug("WebSocket client disconnected")

    return app


# Entrypoint helper
async def serve():
    if not _remote_enabled():
        logger.warning("Remote endpoints disabled (REMOTE_ENABLED=false)")
        return
    host, port = REMOTE_BIND.split(":", 1)
    import uvicorn
    config = uvicorn.Config(create_app(), host=host, port=int(port), log_level="info")
    server = uvicorn.Server(config)
    logger.info("%s remote transport on http://%s:%s", SERVER_NAME, host, port)
    await server.serve()


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("MCP_LOG_LEVEL", "INFO").upper())
    asyncio.run(serve())
