"""API server for ``notebookchat``.

Builds the FastAPI application (CORS plus the versioned ``/api/v1/`` routers)
and runs it under uvicorn.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def create_api_app():
    """Build the FastAPI application with all v1 routers mounted."""
    from fastapi import FastAPI, Request
    from fastapi.exceptions import RequestValidationError
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from notebookchat import __version__
    from notebookchat.api.v1 import mount_v1_routers
    from notebookchat.config import get_settings

    settings = get_settings()

    app = FastAPI(
        title="notebookchat API",
        description="Chat grounded in the sources of your NotebookLM notebooks.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    # --- CORS -----------------------------------------------------------
    # Credentials are cookies, so origins must be explicit.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # --- Validation errors -----------------------------------------------
    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
        detail = f"{field}: {first.get('msg', 'invalid value')}"
        return JSONResponse(status_code=400, content={"detail": detail})

    # --- Mount all /api/v1/ routers -------------------------------------
    mount_v1_routers(app)

    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = 8000,
    dev: bool = False,
) -> None:
    """Start the API server."""
    import uvicorn

    print("\n" + "=" * 50)
    print("\U0001f4d3 NOTEBOOKCHAT API SERVER")
    print("=" * 50)
    print(f"\n\U0001f310 API docs: http://{host}:{port}/api/v1/docs\n")

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "notebookchat.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        app = create_api_app()
        uvicorn.run(app, host=host, port=port)
