"""Debouncing of raw file system events into a clean, ordered stream."""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import timedelta
from functools import cmp_to_key
from pathlib import Path
from time import monotonic
from typing import Any, Union

from argonkit.cache import FileId, FileIdCache, FileIdMap
from argonkit.events import DebouncedEvent, ErrorKind, Event, EventKind, WatchError

_log = logging.getLogger(__name__)

_TICK_DIVISOR = 4

Seconds = Union[float, int, timedelta]
EventHandler = Any


def _seconds(value: Seconds) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _is_under(path: Path, base: Path) -> bool:
    return path == base or path.is_relative_to(base)


def _was_created(queue: deque[DebouncedEvent]) -> bool:
    return bool(queue) and (queue[0].kind.is_create or queue[0].kind is EventKind.RENAME_TO)


def _was_removed(queue: deque[DebouncedEvent]) -> bool:
    return bool(queue) and (queue[0].kind.is_remove or queue[0].kind is EventKind.RENAME_FROM)


def _compare_events(a: DebouncedEvent, b: DebouncedEvent) -> int:
    # Rename events are emitted for their target, hence the last path.
    last_a = a.paths[-1] if a.paths else None
    last_b = b.paths[-1] if b.paths else None
    if last_a == last_b:
        return 0
    return (a.time > b.time) - (a.time < b.time)


def _copy_event(event: Event) -> Event:
    return dataclasses.replace(event, paths=list(event.paths))


class DebounceData:
    """The debouncer state: per-path event queues, pending renames and errors.

    Each queue keeps its events in this order: a remove or move-out event,
    then a rename event, then everything else.
    """

    def __init__(
        self,
        cache: FileIdCache,
        timeout: Seconds,
        merge_renames: bool = True,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.queues: dict[Path, deque[DebouncedEvent]] = {}
        self.cache = cache
        self.rename_event: tuple[DebouncedEvent, FileId | None] | None = None
        self.rescan_event: DebouncedEvent | None = None
        self.errors: list[WatchError] = []
        self.timeout = _seconds(timeout)
        self.merge_renames = merge_renames
        self.clock = clock

    def _expired(self, event: DebouncedEvent, now: float) -> bool:
        return max(0.0, now - event.time) >= self.timeout

    def debounced_events(self) -> list[DebouncedEvent]:
        """Remove and return every event older than the timeout."""
        now = self.clock()
        expired: list[DebouncedEvent] = []
        remaining: dict[Path, deque[DebouncedEvent]] = {}

        if self.rescan_event is not None:
            event, self.rescan_event = self.rescan_event, None
            if self._expired(event, now):
                _log.debug("debounced event: %r", event)
                expired.append(event)
            else:
                self.rescan_event = event

        for path, queue in self.queues.items():
            kind_index: dict[EventKind, int] = {}
            while queue and self._expired(queue[0], now):
                event = queue.popleft()
                previous = kind_index.get(event.kind)
                if previous is not None:
                    del expired[previous]
                    for kind, position in kind_index.items():
                        if position > previous:
                            kind_index[kind] = position - 1
                kind_index[event.kind] = len(expired)
                expired.append(event)
            if queue:
                remaining[path] = queue

        self.queues = remaining
        expired.sort(key=cmp_to_key(_compare_events))
        return expired

    def take_errors(self) -> list[WatchError]:
        """Remove and return every stored error."""
        errors, self.errors = self.errors, []
        return errors

    def add_error(self, error: WatchError) -> None:
        """Store an error to be delivered with the next batch."""
        self.errors.append(error)

    def add_event(self, event: Event) -> None:
        """Take in a raw event."""
        _log.debug("raw event: %r", event)

        if event.need_rescan():
            self.cache.rescan()
            self.rescan_event = DebouncedEvent.from_event(event, self.clock())
            return

        path = event.paths[0]
        kind = event.kind

        if kind.is_create:
            self.cache.add_path(path)
            self._push_event(event, self.clock())
        elif kind.is_rename:
            if kind is EventKind.RENAME_ANY:
                if path.exists():
                    self._handle_rename_to(event)
                else:
                    self._handle_rename_from(event)
            elif kind is EventKind.RENAME_TO:
                self._handle_rename_to(event)
            elif kind is EventKind.RENAME_FROM:
                self._handle_rename_from(event)
            # `both` is rebuilt from `from` and `to`; `other` is unused.
        elif kind.is_remove:
            self._push_remove_event(event, self.clock())
        elif kind is EventKind.OTHER:
            pass
        else:
            if self.cache.cached_file_id(path) is None:
                self.cache.add_path(path)
            self._push_event(event, self.clock())

    def _handle_rename_from(self, event: Event) -> None:
        time = self.clock()
        path = event.paths[0]
        file_id = self.cache.cached_file_id(path)
        self.rename_event = (DebouncedEvent(_copy_event(event), time), file_id)
        self.cache.remove_path(path)
        self._push_event(event, time)

    def _handle_rename_to(self, event: Event) -> None:
        target = event.paths[0]
        self.cache.add_path(target)

        if not self.merge_renames:
            self._push_event(event, self.clock())
            self.rename_event = None
            return

        trackers_match = False
        file_ids_match = False
        if self.rename_event is not None:
            pending, from_id = self.rename_event
            if pending.tracker is not None and event.tracker is not None:
                trackers_match = pending.tracker == event.tracker
            if from_id is not None:
                to_id = self.cache.cached_file_id(target)
                if to_id is not None:
                    file_ids_match = from_id == to_id

        if trackers_match or file_ids_match:
            pending, _ = self.rename_event
            self._push_rename_event(pending.paths[0], event, pending.time)
        else:
            self._push_event(event, self.clock())

        self.rename_event = None

    def _push_rename_event(self, path: Path, event: Event, time: float) -> None:
        target = event.paths[0]
        self.cache.remove_path(path)

        source = self.queues.pop(path, deque())
        if source:
            source.pop()

        original_path, original_time = path, time
        for index, queued in enumerate(source):
            if queued.kind is EventKind.RENAME_BOTH:
                original_path, original_time = queued.paths[0], queued.time
                del source[index]
                break

        if _was_removed(source):
            removed = source.popleft()
            self.queues[removed.paths[0]] = deque([removed])

        for queued in source:
            queued.paths = [target]

        if not _was_created(source):
            source.appendleft(
                DebouncedEvent(
                    Event(
                        EventKind.RENAME_BOTH,
                        [original_path, target],
                        tracker=event.tracker,
                        info=event.info,
                        flag=event.flag,
                    ),
                    original_time,
                )
            )

        existing = self.queues.get(target)
        if existing is not None and not _was_created(existing):
            remove_event = Event(EventKind.REMOVE_ANY, [target])
            if not _was_removed(existing):
                remove_event = remove_event.with_info("override")
            source.appendleft(DebouncedEvent(remove_event, original_time))
        self.queues[target] = source

    def _push_remove_event(self, event: Event, time: float) -> None:
        path = event.paths[0]
        self.queues = {p: q for p, q in self.queues.items() if p == path or not _is_under(p, path)}
        self.cache.remove_path(path)

        queue = self.queues.get(path)
        if queue is None:
            self._push_event(event, time)
        elif _was_created(queue):
            del self.queues[path]
        else:
            self.queues[path] = deque([DebouncedEvent(event, time)])

    def _push_event(self, event: Event, time: float) -> None:
        path = event.paths[0]
        queue = self.queues.get(path)
        if queue is None:
            self.queues[path] = deque([DebouncedEvent(event, time)])
            return
        # Skip duplicate creations and modifications right after a creation.
        if (event.kind.is_create or event.kind.is_data_or_metadata) and _was_created(queue):
            return
        queue.append(DebouncedEvent(event, time))


def _deliver(handler: EventHandler, payload: list) -> None:
    put = getattr(handler, "put", None)
    if callable(put):
        put(payload)
    else:
        handler(payload)


class Debouncer:
    """Runs a background loop that hands debounced batches to a handler.

    The handler is either a callable or an object with a ``put`` method
    (such as ``queue.Queue``). It receives lists of ``DebouncedEvent`` or,
    separately, lists of ``WatchError``.
    """

    def __init__(self, data: DebounceData, tick: float, event_handler: EventHandler) -> None:
        self._data = data
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._tick = tick
        self._handler = event_handler
        self._thread: threading.Thread | None = threading.Thread(
            target=self._run, name="debouncer loop", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.is_set():
            self._stop.wait(self._tick)
            with self._lock:
                events = self._data.debounced_events()
                errors = self._data.take_errors()
            if events:
                _deliver(self._handler, events)
            if errors:
                _deliver(self._handler, errors)

    def feed(self, result: Event | WatchError) -> None:
        """Pass a raw event, or a watcher error, into the debouncer."""
        with self._lock:
            if isinstance(result, WatchError):
                self._data.add_error(result)
            else:
                self._data.add_event(result)

    def stop(self) -> None:
        """Stop the loop and wait for it to finish (up to one tick)."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join()

    def stop_nonblocking(self) -> None:
        """Stop the loop without waiting for it."""
        self._stop.set()

    @contextmanager
    def cache(self) -> Iterator[FileIdCache]:
        """Hold the debouncer lock and yield its file ID cache."""
        with self._lock:
            yield self._data.cache

    def __enter__(self) -> Debouncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def new_debouncer(
    timeout: Seconds,
    tick_rate: Seconds | None,
    event_handler: EventHandler,
    merge_renames: bool = True,
    cache: FileIdCache | None = None,
) -> Debouncer:
    """Start a debouncer; the tick rate defaults to a quarter of the timeout."""
    timeout_s = _seconds(timeout)
    if tick_rate is None:
        tick = timeout_s / _TICK_DIVISOR
    else:
        tick = _seconds(tick_rate)
        if tick > timeout_s:
            raise WatchError(
                ErrorKind.GENERIC,
                f"Invalid tick_rate, tick rate {tick}s > {timeout_s}s timeout!",
            )
    data = DebounceData(FileIdMap() if cache is None else cache, timeout_s, merge_renames)
    return Debouncer(data, tick, event_handler)