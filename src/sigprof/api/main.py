"""
Debug application factory

Every call returns a new FastAPI instance with its own routers, so the debug
routes are never reachable through a registry that other code could also
populate. The profiler calls the factory once per session.
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from sigprof.api.middleware.error_handler import register_exception_handlers
from sigprof.api.routes import pprof, vars as vars_routes
from sigprof.runtime.vars import VarRegistry
from sigprof.utils.logger import get_logger
from sigprof.models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)


def create_app(vars: Optional[VarRegistry] = None) -> FastAPI:
    """
    Create the debug endpoint application.

    Routes:
        /debug/pprof/            index
        /debug/pprof/cmdline     command line
        /debug/pprof/profile     CPU profile (collapsed stacks)
        /debug/pprof/symbol      symbol lookup
        /debug/pprof/threads     thread stack dump
        /debug/pprof/trace       execution trace (JSON lines)
        /debug/vars              runtime + published variables

    Args:
        vars: registry served on /debug/vars (default: empty registry)

    Returns:
        FastAPI application with docs disabled
    """
    app = FastAPI(
        title="sigprof debug endpoint",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    register_exception_handlers(app)

    app.include_router(pprof.create_router())
    app.include_router(vars_routes.create_router(vars if vars is not None else VarRegistry()))

    @app.get("/", include_in_schema=False)
    async def root():
        """Redirect root to the profile index"""
        return RedirectResponse("/debug/pprof/")

    log.debug("Debug app created", routes=len(app.routes))
    return app
