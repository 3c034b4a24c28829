"""FastAPI application entrypoint for permabundle service mode."""

from __future__ import annotations

import asyncio
import base64
import binascii
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ConfigError
from ..errors import (
    AcquisitionError,
    BundleError,
    DeployError,
    InvalidRepositoryError,
    InvalidUrlError,
    SizeExceededError,
)
from ..models import BundleResult
from ..orchestrator import Orchestrator

T = TypeVar("T")


class GithubBundleRequest(BaseModel):
    repository: str
    deploy: bool = False


class UrlBundleRequest(BaseModel):
    url: str
    deploy: bool = False


class FileBundleRequest(BaseModel):
    filename: str
    content: str
    deploy: bool = False


class DeployRequest(BaseModel):
    html: str


class BundleResponse(BaseModel):
    html: str
    source: str
    size_kb: float
    project_type: Optional[str] = None
    entry_path: Optional[str] = None
    links: Optional[List[str]] = None


class DeployResponse(BaseModel):
    success: bool
    links: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing bundle and deploy operations."""

    app = FastAPI(title="Permabundle Service", version="0.1.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    async def _in_executor(func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    async def _respond(
        orchestrator: Orchestrator, produce: Callable[[], BundleResult], deploy: bool
    ) -> BundleResponse:
        def _run() -> BundleResponse:
            result = produce()
            links = orchestrator.deploy(result.html).links if deploy else None
            return _bundle_response(result, links)

        return await _in_executor(_run)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/bundle/github", response_model=BundleResponse)
    async def bundle_github(
        payload: GithubBundleRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> BundleResponse:
        return await _respond(
            orchestrator, lambda: orchestrator.bundle_github(payload.repository), payload.deploy
        )

    @app.post("/bundle/url", response_model=BundleResponse)
    async def bundle_url(
        payload: UrlBundleRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> BundleResponse:
        return await _respond(orchestrator, lambda: orchestrator.bundle_url(payload.url), payload.deploy)

    @app.post("/bundle/file", response_model=BundleResponse)
    async def bundle_file(
        payload: FileBundleRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> BundleResponse:
        try:
            data = base64.b64decode(payload.content, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise HTTPException(status_code=400, detail="content must be base64 encoded") from exc
        return await _respond(
            orchestrator, lambda: orchestrator.bundle_file(payload.filename, data), payload.deploy
        )

    @app.post("/bundle/archive", response_model=BundleResponse)
    async def bundle_archive(
        request: Request,
        deploy: bool = False,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> BundleResponse:
        data = await request.body()
        return await _respond(orchestrator, lambda: orchestrator.bundle_archive(data), deploy)

    @app.post("/deploy", response_model=DeployResponse)
    async def deploy(
        payload: DeployRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> DeployResponse:
        result = await _in_executor(lambda: orchestrator.deploy(payload.html))
        return DeployResponse(success=result.success, links=result.links)

    @app.exception_handler(SizeExceededError)
    async def size_exceeded_handler(_: Any, exc: SizeExceededError) -> JSONResponse:
        return JSONResponse(
            status_code=413,
            content={"detail": str(exc), "size_kb": round(exc.size_kb, 2), "limit_kb": exc.limit_kb},
        )

    @app.exception_handler(AcquisitionError)
    async def acquisition_error_handler(_: Any, exc: AcquisitionError) -> JSONResponse:
        status_code = 400 if isinstance(exc, (InvalidRepositoryError, InvalidUrlError)) else 502
        return JSONResponse(status_code=status_code, content={"detail": str(exc), "failures": exc.failures})

    @app.exception_handler(DeployError)
    async def deploy_error_handler(_: Any, exc: DeployError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.reason})

    @app.exception_handler(BundleError)
    async def bundle_error_handler(_: Any, exc: BundleError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def _bundle_response(result: BundleResult, links: Optional[List[str]]) -> BundleResponse:
    return BundleResponse(
        html=result.html,
        source=result.source.value,
        size_kb=round(result.size_kb, 2),
        project_type=result.project_type.value if result.project_type else None,
        entry_path=result.entry_path,
        links=links,
    )


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, config_path: str | Path | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    try:
        Orchestrator.from_config_path(config_path)
    except ConfigError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    app = create_app(lambda: Orchestrator.from_config_path(config_path))
    uvicorn.run(app, host=host, port=port)
