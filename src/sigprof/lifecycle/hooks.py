"""
Hook protocol and hook chain.

Hooks let an integrator react to the debug endpoint coming up and going
away, e.g. raise a sampling rate before profiling and restore it afterwards.

Example:
    class VerboseGCHook:
        def __init__(self):
            self._lock = threading.Lock()
            self.active = False

        def pre_start(self) -> None:
            with self._lock:
                gc.set_debug(gc.DEBUG_STATS)
                self.active = True

        def post_shutdown(self) -> None:
            with self._lock:
                gc.set_debug(0)
                self.active = False
"""

from typing import Iterable, Protocol, Tuple, runtime_checkable

from sigprof.lifecycle.event_handler import EventHandler
from sigprof.models.enums import EventType, HookPhase


@runtime_checkable
class Hook(Protocol):
    """
    Protocol for objects observing the debug endpoint lifetime.

    Both methods run synchronously on the event loop; a slow hook delays the
    session. Hooks holding mutable state guard it themselves.
    """

    def pre_start(self) -> None:
        """
        Called after the signal was received, before the endpoint listens.
        """
        ...

    def post_shutdown(self) -> None:
        """
        Called after the endpoint has shut down or failed to start.
        """
        ...


class HookChain:
    """
    Ordered, immutable sequence of hooks.

    A failing hook is reported through the event handler and does not stop
    the remaining hooks of the same phase.
    """

    def __init__(self, hooks: Iterable[Hook], event_handler: EventHandler):
        self._hooks: Tuple[Hook, ...] = tuple(hooks)
        self._evt = event_handler

    def __len__(self) -> int:
        return len(self._hooks)

    def __iter__(self):
        return iter(self._hooks)

    def pre_start(self) -> None:
        """Run every hook's pre_start() in registration order."""
        self._run(HookPhase.PRE_START)

    def post_shutdown(self) -> None:
        """Run every hook's post_shutdown() in registration order."""
        self._run(HookPhase.POST_SHUTDOWN)

    def _run(self, phase: HookPhase) -> None:
        for hook in self._hooks:
            method = hook.pre_start if phase is HookPhase.PRE_START else hook.post_shutdown
            try:
                method()
            except Exception as e:
                self._evt(
                    EventType.ERROR,
                    "hook failed",
                    hook=type(hook).__name__,
                    phase=phase.name,
                    err=repr(e),
                )
