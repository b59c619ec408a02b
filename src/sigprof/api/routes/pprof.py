"""
Profiling endpoints under /debug/pprof

Blocking handlers (profile, trace, threads) are plain `def` routes so
FastAPI runs them in its threadpool; the event loop keeps serving while a
profile is being collected.
"""

import html
import inspect
import json
import sys
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from sigprof.models.errors import InvalidParameterError
from sigprof.runtime import sampler
from sigprof.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)

PROFILES = [
    ("cmdline", "The command line invocation of the current program"),
    ("profile", "CPU profile of all threads, collapsed stacks. "
                "Use ?seconds=N to set the duration (default 30)"),
    ("symbol", "Resolves dotted names (pkg.mod:attr) to source locations"),
    ("threads", "Stack traces of all current threads"),
    ("trace", "Timestamped stack samples of all threads as JSON lines. "
              "Use ?seconds=N to set the duration (default 1)"),
]


def parse_seconds(value: Optional[str], default: float, maximum: float) -> float:
    """
    Parse the `seconds` query parameter.

    Raises:
        InvalidParameterError: Not a number or outside (0, maximum]
    """
    if value is None or value == "":
        return default
    try:
        seconds = float(value)
    except ValueError:
        raise InvalidParameterError("seconds", value, "must be a number")
    if not 0 < seconds <= maximum:
        raise InvalidParameterError("seconds", value, f"must be greater than 0 and at most {maximum:g}")
    return seconds


def resolve_symbol(name: str) -> Optional[str]:
    """
    Resolve "pkg.mod:attr.sub" or "pkg.mod.attr" to "file:line".

    Only modules already imported are searched; a lookup never imports code.
    """
    if ":" in name:
        module_name, _, attr_path = name.partition(":")
        candidates = [(module_name, attr_path)]
    else:
        parts = name.split(".")
        candidates = [
            (".".join(parts[:i]), ".".join(parts[i:]))
            for i in range(len(parts), 0, -1)
        ]

    for module_name, attr_path in candidates:
        obj = sys.modules.get(module_name)
        if obj is None:
            continue
        try:
            for attr in filter(None, attr_path.split(".")):
                obj = getattr(obj, attr)
            obj = inspect.unwrap(obj)
            filename = inspect.getsourcefile(obj) or inspect.getfile(obj)
            line = 1 if inspect.ismodule(obj) else inspect.getsourcelines(obj)[1]
        except (AttributeError, TypeError, OSError):
            continue
        return f"{filename}:{line}"
    return None


def _symbol_lines(names) -> str:
    lines = []
    for name in names:
        location = resolve_symbol(name)
        lines.append(f"{name} {location or '???'}")
    return "\n".join(lines) + "\n"


def create_router() -> APIRouter:
    """Build a fresh /debug/pprof router (never shared between apps)."""
    router = APIRouter(prefix="/debug/pprof", tags=["pprof"])

    @router.get("/", response_class=HTMLResponse)
    async def index():
        """Listing of the available profiles"""
        rows = "\n".join(
            f'<tr><td><a href="{name}">{name}</a></td><td>{html.escape(desc)}</td></tr>'
            for name, desc in PROFILES
        )
        return (
            "<html><head><title>/debug/pprof/</title></head><body>\n"
            "<h1>/debug/pprof/</h1>\n"
            f"<p>Python {html.escape(sys.version.split()[0])}</p>\n"
            f"<table>\n{rows}\n</table>\n"
            '<p><a href="/debug/vars">/debug/vars</a></p>\n'
            "</body></html>\n"
        )

    @router.get("/cmdline", response_class=PlainTextResponse)
    async def cmdline():
        """Command line arguments separated by NUL bytes"""
        return "\x00".join(sys.argv)

    @router.get("/profile", response_class=PlainTextResponse)
    def cpu_profile(seconds: Optional[str] = None):
        """Statistical CPU profile of every thread"""
        duration = parse_seconds(seconds, default=30, maximum=300)
        log.info("Collecting CPU profile", seconds=duration)
        counts = sampler.profile(duration)
        return PlainTextResponse(
            sampler.format_collapsed(counts),
            headers={"Content-Disposition": 'attachment; filename="profile.txt"'},
        )

    @router.get("/symbol", response_class=PlainTextResponse)
    async def symbol_get(name: Optional[str] = None):
        """Without a name: report symbol lookup support. With ?name=: resolve it."""
        if not name:
            return "num_symbols: 1\n"
        return _symbol_lines(name.split("+"))

    @router.post("/symbol", response_class=PlainTextResponse)
    async def symbol_post(request: Request):
        """Resolve names sent in the body, separated by '+' or whitespace"""
        body = (await request.body()).decode("utf-8", errors="replace")
        names = [n for n in body.replace("+", " ").split() if n]
        return _symbol_lines(names)

    @router.get("/threads", response_class=PlainTextResponse)
    def threads():
        """Current stack of every thread"""
        return sampler.thread_dump()

    @router.get("/trace")
    def execution_trace(seconds: Optional[str] = None):
        """Timestamped stack samples, one JSON object per line"""
        duration = parse_seconds(seconds, default=1, maximum=60)
        log.info("Collecting execution trace", seconds=duration)
        events = sampler.trace(duration)
        body = "".join(json.dumps(e) + "\n" for e in events)
        return Response(
            body,
            media_type="application/x-ndjson",
            headers={"Content-Disposition": 'attachment; filename="trace.jsonl"'},
        )

    return router
