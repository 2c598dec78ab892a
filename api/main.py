from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from csrfguard import config
from csrfguard.security import CSRFError, TokenStore
from csrfguard.sweeper import TokenSweeper


class Health(BaseModel):
    status: str
    live_tokens: int
    sweeper_running: bool


def create_app(store: Optional[TokenStore] = None, sweep_interval: Optional[float] = None) -> FastAPI:
    app = FastAPI(title="csrfguard", version="1.0.0")
    app.state.tokens = store if store is not None else TokenStore()
    app.state.sweeper = TokenSweeper(app.state.tokens, sweep_interval)

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=[config.CSRF_HEADER],
        )

    @app.on_event("startup")
    async def startup_event():
        app.state.sweeper.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.sweeper.stop()

    @app.exception_handler(CSRFError)
    async def csrf_error_handler(request: Request, exc: CSRFError):
        return PlainTextResponse(exc.detail, status_code=exc.status_code)

    @app.get("/csrf-token", response_class=PlainTextResponse)
    async def get_csrf_token(request: Request):
        return request.app.state.tokens.issue()

    @app.post("/process", response_class=PlainTextResponse)
    async def process(request: Request):
        token = request.headers.get(config.CSRF_HEADER, "")
        request.app.state.tokens.validate(token)
        return ""

    @app.get("/healthz", response_model=Health)
    async def healthz(request: Request):
        return Health(
            status="ok",
            live_tokens=len(request.app.state.tokens),
            sweeper_running=request.app.state.sweeper.running,
        )

    return app


app = create_app()
