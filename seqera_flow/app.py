import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from seqera_flow.core.settings import load_platform_config
from seqera_flow.routes import admin, config


def create_app() -> FastAPI:
    app = FastAPI(title="Seqera Flow Admin API", version="0.1.0")

    level = os.getenv("SEQERA_LOG_LEVEL")
    if level:
        logging.basicConfig(level=level.upper())

    app.state.platform_config = load_platform_config()

    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:1880", "http://127.0.0.1:1880"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(admin.router, prefix="/api")
    app.include_router(config.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Seqera Flow Admin API",
                "docs": "/docs",
                "health": "/api/config/connectivity-check",
            }
        )

    return app


app = create_app()
