"""
Stack sampler - statistical CPU profile and execution trace of all threads.

Samples sys._current_frames() at a fixed interval. Blocking by design: the
debug routes call these functions from FastAPI's threadpool, so the sampling
thread is excluded from its own samples.

Output formats:
- profile(): collapsed stacks, one line per distinct stack,
  "root;child;leaf count" (flamegraph.pl / speedscope compatible)
- trace(): list of timestamped samples, one per thread per tick
- thread_dump(): human-readable stack of every thread
"""

import sys
import threading
import time
import traceback
from collections import Counter
from typing import Dict, List, Optional
from types import FrameType


def _frame_label(frame: FrameType) -> str:
    module = frame.f_globals.get("__name__", "?")
    return f"{module}.{frame.f_code.co_name}"


def _stack(frame: Optional[FrameType]) -> List[str]:
    """Return labels from outermost to innermost frame."""
    labels = []
    while frame is not None:
        labels.append(_frame_label(frame))
        frame = frame.f_back
    labels.reverse()
    return labels


def _thread_names() -> Dict[int, str]:
    return {t.ident: t.name for t in threading.enumerate() if t.ident is not None}


def sample_once(exclude: Optional[int] = None) -> Dict[int, List[str]]:
    """
    Take one snapshot of every thread's stack.

    Args:
        exclude: thread ident to leave out (default: calling thread)

    Returns:
        {thread ident: [outermost, ..., innermost]}
    """
    skip = threading.get_ident() if exclude is None else exclude
    return {
        ident: _stack(frame)
        for ident, frame in sys._current_frames().items()
        if ident != skip
    }


def profile(seconds: float, interval: float = 0.01) -> Counter:
    """
    Sample all threads for `seconds` and count identical stacks.

    Returns:
        Counter mapping "root;...;leaf" to number of samples
    """
    counts: Counter = Counter()
    deadline = time.monotonic() + seconds
    while True:
        for stack in sample_once().values():
            if stack:
                counts[";".join(stack)] += 1
        if time.monotonic() >= deadline:
            break
        time.sleep(interval)
    return counts


def format_collapsed(counts: Counter) -> str:
    return "".join(f"{stack} {n}\n" for stack, n in counts.most_common())


def trace(seconds: float, interval: float = 0.05) -> List[dict]:
    """
    Record timestamped stacks of all threads for `seconds`.

    Returns:
        [{"t": seconds since start, "thread": name, "ident": id, "stack": [...]}]
    """
    events = []
    start = time.monotonic()
    deadline = start + seconds
    while True:
        now = time.monotonic()
        names = _thread_names()
        for ident, stack in sample_once().items():
            events.append({
                "t": round(now - start, 6),
                "thread": names.get(ident, str(ident)),
                "ident": ident,
                "stack": stack,
            })
        if now >= deadline:
            break
        time.sleep(interval)
    return events


def thread_dump() -> str:
    """Format the current stack of every thread, like a traceback."""
    names = _thread_names()
    parts = []
    for ident, frame in sys._current_frames().items():
        parts.append(f"Thread {names.get(ident, '?')} ({ident}):\n")
        parts.extend(traceback.format_stack(frame))
        parts.append("\n")
    return "".join(parts)
