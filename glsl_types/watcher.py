"""
Watch mode: regenerate bindings when shader files change.

Filesystem events arrive on the watchdog observer thread. They are debounced
per path and handed to a single consumer loop, so regenerations of the same
file never overlap.
"""

import os
import queue
import threading
from collections.abc import Callable

import watchdog.events
import watchdog.observers
from watchdog.events import FileSystemEventHandler

from glsl_types.filesystem import is_shader_file
from glsl_types.session import GenerationSession

DEFAULT_DELAY = 0.1

_HANDLED_EVENTS = {
    watchdog.events.EVENT_TYPE_CREATED,
    watchdog.events.EVENT_TYPE_MODIFIED,
    watchdog.events.EVENT_TYPE_MOVED,
    watchdog.events.EVENT_TYPE_DELETED,
}


class Debouncer:
    """Collapses bursts of events for the same path into one callback.

    Each submit restarts the path's timer; the callback runs once the path
    has been quiet for `delay` seconds.
    """

    def __init__(self, delay: float, callback: Callable[[str], None]):
        self.delay = delay
        self.callback = callback
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def submit(self, path: str) -> None:
        with self._lock:
            timer = self._timers.pop(path, None)
            if timer is not None:
                timer.cancel()
            timer = threading.Timer(self.delay, self._fire)
            timer.args = (path, timer)
            timer.daemon = True
            self._timers[path] = timer
            timer.start()

    def _fire(self, path: str, timer: threading.Timer) -> None:
        with self._lock:
            if self._timers.get(path) is not timer:
                # Replaced or cancelled after this timer started running
                return
            del self._timers[path]
        self.callback(path)

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def cancel(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()


class ShaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler forwarding shader file changes to a debouncer."""

    def __init__(self, debouncer: Debouncer):
        self.debouncer = debouncer

    def on_any_event(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle a file system event.

        Args:
            event: File system event
        """
        if event.is_directory or event.event_type not in _HANDLED_EVENTS:
            return
        paths = [event.src_path]
        if event.event_type == watchdog.events.EVENT_TYPE_MOVED:
            paths.append(event.dest_path)
        for path in paths:
            path = os.fsdecode(path)
            if is_shader_file(path):
                self.debouncer.submit(path)


def watch(
    session: GenerationSession,
    delay: float = DEFAULT_DELAY,
    stop: threading.Event | None = None,
) -> None:
    """Generate every shader of the session, then regenerate on changes.

    Blocks until `stop` is set or the process is interrupted.

    Args:
        session: Session holding the input tree and output options
        delay: Quiet period in seconds before a changed path is processed
        stop: Event that ends the loop when set
    """
    stop = stop or threading.Event()
    work: queue.Queue[str] = queue.Queue()
    debouncer = Debouncer(delay, work.put)
    log = session.reporter.log

    session.run_all()

    observer = watchdog.observers.Observer()
    observer.schedule(ShaderChangeHandler(debouncer), path=session.input_root, recursive=True)
    observer.start()
    log.info(f"Watching for changes in {session.input_root}")

    try:
        while not stop.is_set():
            try:
                path = work.get(timeout=0.2)
            except queue.Empty:
                continue
            log.debug(f"Detected changes in {path}")
            session.handle_change(path)
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received, stopping...")
    finally:
        debouncer.cancel()
        observer.stop()
        observer.join()
