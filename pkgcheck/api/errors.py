"""Unified error handling — payload / GitHub / bot errors → JSON."""

from __future__ import annotations

import httpx
import pydantic
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pkgcheck.exceptions import PackagesCheckError


async def _payload_error_handler(_request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    return JSONResponse(status_code=422, content={"detail": "; ".join(messages)})


async def _github_error_handler(_request: Request, exc: httpx.HTTPError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": f"GitHub API error: {exc}"})


async def _bot_error_handler(_request: Request, exc: PackagesCheckError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(pydantic.ValidationError, _payload_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(httpx.HTTPError, _github_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PackagesCheckError, _bot_error_handler)  # type: ignore[arg-type]
