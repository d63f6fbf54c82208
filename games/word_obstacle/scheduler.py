"""Frame-driven timers for the game loop.

The pygame loop calls advance(dt) once per frame; due callbacks fire in
due-time order on the caller's thread. Tasks scheduled from inside a
callback are timed from that callback's due time, so a 70ms task keeps a
70ms cadence even when frames are late.
"""

import itertools
import logging

log = logging.getLogger(__name__)

# catch-up cap for one advance(); periodic tasks past it skip ahead
MAX_FIRES_PER_ADVANCE = 500


class Handle:
    def __init__(self, callback, due, interval=None, name=""):
        self.callback = callback
        self.due = due
        self.interval = interval
        self.name = name
        self.cancelled = False
        self.seq = 0

    @property
    def periodic(self):
        return self.interval is not None

    def cancel(self):
        self.cancelled = True

    def __repr__(self):
        kind = f"every {self.interval}ms" if self.periodic else "once"
        return f"<Handle {self.name or self.callback!r} {kind} due={self.due}>"


class TickScheduler:
    def __init__(self):
        self.now = 0
        self._tasks = []
        self._order = itertools.count()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.cancel_all()
        return False

    def _add(self, handle):
        handle.seq = next(self._order)
        self._tasks.append(handle)
        return handle

    def every(self, interval_ms, callback, name=""):
        if interval_ms <= 0:
            raise ValueError("interval must be positive")
        return self._add(Handle(callback, self.now + interval_ms, interval_ms, name))

    def after(self, delay_ms, callback, name=""):
        return self._add(Handle(callback, self.now + max(0, delay_ms), None, name))

    def cancel(self, handle):
        if handle is not None:
            handle.cancel()

    def cancel_all(self):
        for h in self._tasks:
            h.cancel()
        self._tasks = []

    def pending(self):
        return [h for h in self._tasks if not h.cancelled]

    def _next_due(self, until):
        live = [h for h in self._tasks if not h.cancelled and h.due <= until]
        if not live:
            return None
        return min(live, key=lambda h: (h.due, h.seq))

    def advance(self, dt_ms):
        """Move the clock forward by dt_ms and fire everything that came due."""
        target = self.now + max(0, dt_ms)
        fired = 0
        while fired < MAX_FIRES_PER_ADVANCE:
            h = self._next_due(target)
            if h is None:
                break
            self.now = h.due
            if h.periodic:
                h.due += h.interval
            else:
                h.cancel()
            fired += 1
            h.callback()
        else:
            log.warning("Dropped timer catch-up after %d callbacks", fired)
            for h in self._tasks:
                if h.periodic and not h.cancelled and h.due <= target:
                    # skip ahead to the next slot after target
                    missed = (target - h.due) // h.interval + 1
                    h.due += missed * h.interval
        self.now = target
        self._tasks = [h for h in self._tasks if not h.cancelled]
        return fired
