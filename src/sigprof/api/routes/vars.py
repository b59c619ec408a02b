"""
/debug/vars - JSON dump of runtime state and published variables
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from sigprof.runtime.vars import VarRegistry


def create_router(registry: VarRegistry) -> APIRouter:
    """Build a /debug/vars router serving `registry`."""
    router = APIRouter(tags=["vars"])

    @router.get("/debug/vars")
    def debug_vars():
        """cmdline, gc, threads, rusage and every published variable"""
        return JSONResponse(registry.snapshot())

    return router
