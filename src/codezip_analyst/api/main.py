"""FastAPI application entry point for the CodeZip Analyst API."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codezip_analyst.api.routes import archives, health
from codezip_analyst.config import configure_logging

app = FastAPI(
    title="CodeZip Analyst API",
    description="API for browsing source archives and requesting AI code analysis",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(archives.router, prefix="/api")


def main() -> None:
    """Start the development server."""
    import uvicorn

    configure_logging()
    uvicorn.run(
        "codezip_analyst.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
