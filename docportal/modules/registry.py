"""
registry.py
- Purpose: Static registry of the app's modules (name -> init function).
- Design: Each init returns a typed ModuleHandle. A failing init is recorded
  as ModuleInitResult(ok=False) and logged; the other modules still load.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from fastapi import APIRouter, FastAPI

logger = logging.getLogger("docportal.modules")


@dataclass(frozen=True)
class ModuleHandle:
    name: str
    router: APIRouter


@dataclass(frozen=True)
class ModuleInitResult:
    name: str
    ok: bool
    handle: ModuleHandle | None = None
    error: str | None = None


ModuleInit = Callable[[], ModuleHandle]


def _init_health() -> ModuleHandle:
    from docportal.routers.health import router

    return ModuleHandle("health", router)


def _init_auth() -> ModuleHandle:
    from docportal.routers.auth import router

    return ModuleHandle("auth", router)


def _init_tenants() -> ModuleHandle:
    from docportal.routers.tenants import router

    return ModuleHandle("tenants", router)


def _init_documents() -> ModuleHandle:
    from docportal.routers.documents import router

    return ModuleHandle("documents", router)


def _init_analyses() -> ModuleHandle:
    from docportal.routers.analyses import router

    return ModuleHandle("analyses", router)


def _init_llm() -> ModuleHandle:
    from docportal.routers.llm_health import router

    return ModuleHandle("llm", router)


MODULES: dict[str, ModuleInit] = {
    "health": _init_health,
    "auth": _init_auth,
    "tenants": _init_tenants,
    "documents": _init_documents,
    "analyses": _init_analyses,
    "llm": _init_llm,
}


def initialize_modules(app: FastAPI, registry: dict[str, ModuleInit] | None = None) -> list[ModuleInitResult]:
    results: list[ModuleInitResult] = []
    for name, init in (registry if registry is not None else MODULES).items():
        try:
            handle = init()
            app.include_router(handle.router)
        except Exception as e:
            logger.exception("module.init_failed", extra={"module_name": name})
            results.append(ModuleInitResult(name=name, ok=False, error=f"{type(e).__name__}: {e}"))
            continue
        logger.info("module.initialized", extra={"module_name": name})
        results.append(ModuleInitResult(name=name, ok=True, handle=handle))

    app.state.modules = results
    return results
