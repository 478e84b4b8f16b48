"""FastAPI application exposing atlas generate, write, and status."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import AtlasSettings, ConfigError, load_settings
from ..engine import AtlasEngine
from ..models import InlineTag
from ..repo_scanner import resolve_root

_T = TypeVar("_T")


class SettingsPayload(BaseModel):
    max_inline_tags: Optional[int] = None
    domain_inference_sensitivity: Optional[str] = None
    exclude_patterns: List[str] = Field(default_factory=list)


class GenerateRequest(BaseModel):
    path: str
    settings: Optional[SettingsPayload] = None


class GenerateResponse(BaseModel):
    scanResult: Dict[str, Any]
    generatedContent: Dict[str, Any]


class InlineTagPayload(BaseModel):
    filePath: str
    relativePath: str
    currentTag: Optional[str] = None
    suggestedTag: str
    reason: str = ""
    selected: bool = False

    def to_inline_tag(self) -> InlineTag:
        return InlineTag(
            file_path=self.filePath,
            relative_path=self.relativePath,
            current_tag=self.currentTag,
            suggested_tag=self.suggestedTag,
            reason=self.reason,
            selected=self.selected,
        )


class WriteRequest(BaseModel):
    path: str
    claudeMd: str
    repoIndex: str
    inlineTags: List[InlineTagPayload] = Field(default_factory=list)


class WriteResponse(BaseModel):
    claudeMdWritten: bool
    repoIndexWritten: bool
    inlineTagsWritten: int


class StatusRequest(BaseModel):
    path: str


class StatusResponse(BaseModel):
    hasAtlas: bool
    claudeMdPath: Optional[str] = None
    repoIndexPath: Optional[str] = None
    lastGenerated: Optional[str] = None
    inlineTagCount: int


class HealthResponse(BaseModel):
    status: str


def _default_engine() -> AtlasEngine:
    return AtlasEngine()


def _resolve_settings(request: GenerateRequest) -> AtlasSettings:
    # Reject a missing or non-directory root before reading its .atlas.yml.
    settings = load_settings(resolve_root(request.path))
    if request.settings is None:
        return settings
    return settings.with_overrides(
        max_inline_tags=request.settings.max_inline_tags,
        domain_inference_sensitivity=request.settings.domain_inference_sensitivity,
        exclude_patterns=request.settings.exclude_patterns,
    )


async def _run_blocking(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    engine_factory: Callable[[], AtlasEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application exposing atlas operations."""

    app = FastAPI(title="Repository Atlas Service", version="0.1.0")

    async def get_engine() -> AtlasEngine:
        # Fresh engine per request; scans share no state.
        return engine_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        engine: AtlasEngine = Depends(get_engine),
    ) -> GenerateResponse:
        def _run() -> Dict[str, Any]:
            settings = _resolve_settings(payload)
            return engine.generate(payload.path, settings).to_dict()

        result = await _run_blocking(_run)
        return GenerateResponse(**result)

    @app.post("/write", response_model=WriteResponse)
    async def write(
        payload: WriteRequest,
        engine: AtlasEngine = Depends(get_engine),
    ) -> WriteResponse:
        tags = [tag.to_inline_tag() for tag in payload.inlineTags]

        def _run() -> Dict[str, Any]:
            return engine.write(payload.path, payload.claudeMd, payload.repoIndex, tags).to_dict()

        result = await _run_blocking(_run)
        return WriteResponse(**result)

    @app.post("/status", response_model=StatusResponse)
    async def status(
        payload: StatusRequest,
        engine: AtlasEngine = Depends(get_engine),
    ) -> StatusResponse:
        result = await _run_blocking(lambda: engine.status(payload.path).to_dict())
        return StatusResponse(**result)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
