"""Live synchronization of one resource kind into an ordered snapshot.

A ResourceSynchronizer lists a kind once, then applies the watch stream
that follows the listing on a background thread. Every applied change
marks the snapshot dirty and pings a ChangeNotifier, so the UI can pull
a fresh copy on its next render without ever waiting on the cluster.

Lifecycle::

    CREATED --bootstrap()--> BOOTSTRAPPED --start()--> WATCHING --stop()--> STOPPED

``stop()`` is accepted from any state and is final.

``resync()`` re-lists in place without leaving WATCHING. The watch is not
reconnected when the server ends it; the snapshot then stays as last
seen until the next manual resync.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from vigilant.integrations.kubernetes.exceptions import KubernetesError
from vigilant.integrations.kubernetes.models.base import TrackedResource
from vigilant.services.kubernetes.adapters import EventType
from vigilant.services.kubernetes.notifier import ChangeNotifier
from vigilant.utils.ordered_map import OrderedCollection

if TYPE_CHECKING:
    from vigilant.services.kubernetes.adapters import ResourceAdapter, WatchEvent, WatchStream

logger = structlog.get_logger()

V = TypeVar("V", bound=TrackedResource)


class SyncState(Enum):
    """Lifecycle states of a ResourceSynchronizer."""

    CREATED = "created"
    BOOTSTRAPPED = "bootstrapped"
    WATCHING = "watching"
    STOPPED = "stopped"


class ResourceSynchronizer(Generic[V]):
    """Keeps an OrderedCollection consistent with a cluster watch.

    Only ``bootstrap``/``resync`` and the reconcile thread mutate the
    collection. Consumers read copies through ``values()`` and learn about
    changes from ``consume_dirty()`` or the notifier channel.

    Args:
        adapter: List/watch/project operations for the tracked kind.
        notifier: Change signal shared with the UI. A private one is
            created when omitted.
        log: Bound structlog logger; defaults to one bound with the
            adapter's resource name.
    """

    def __init__(
        self,
        adapter: ResourceAdapter[V],
        *,
        notifier: ChangeNotifier | None = None,
        log: Any = None,
    ) -> None:
        self._adapter = adapter
        self._notifier = notifier or ChangeNotifier()
        self._log = log or logger.bind(resource=adapter.resource_name)
        self._collection: OrderedCollection[V] = OrderedCollection()

        self._lock = threading.Lock()
        self._dirty = False
        self._started = False
        self._state = SyncState.CREATED
        self._resource_version: str | None = None
        self._cancel = threading.Event()
        self._stream: WatchStream | None = None
        self._thread: threading.Thread | None = None

    # =========================================================================
    # Read Side
    # =========================================================================

    @property
    def resource_name(self) -> str:
        return self._adapter.resource_name

    @property
    def adapter(self) -> ResourceAdapter[V]:
        return self._adapter

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def resource_version(self) -> str | None:
        """Version the current watch resumes from."""
        return self._resource_version

    @property
    def is_started(self) -> bool:
        return self._started

    def values(self) -> list[V]:
        """Ordered snapshot of the tracked resources."""
        return self._collection.values()

    def __len__(self) -> int:
        return len(self._collection)

    def consume_dirty(self) -> bool:
        """Atomically read and clear the dirty flag.

        Clear-before-read means a change that lands while the caller is
        copying ``values()`` sets the flag again and is picked up by the
        next render.
        """
        with self._lock:
            dirty = self._dirty
            self._dirty = False
            return dirty

    def _mark_changed(self) -> None:
        with self._lock:
            self._dirty = True
        self._notifier.signal()

    # =========================================================================
    # Listing
    # =========================================================================

    def bootstrap(self) -> bool:
        """List the kind and replace the snapshot with the result.

        Failure leaves the previous snapshot untouched and is only logged.

        Returns:
            True when the listing succeeded.
        """
        try:
            result = self._adapter.list()
            items = [(self._adapter.key_of(obj), self._adapter.project(obj)) for obj in result.items]
        except KubernetesError as e:
            self._log.warning("bootstrap_failed", error=str(e), status_code=e.status_code)
            return False
        except Exception as e:
            self._log.exception("bootstrap_failed", error=str(e))
            return False

        self._collection.replace(items)
        self._resource_version = result.resource_version
        if self._state is SyncState.CREATED:
            self._state = SyncState.BOOTSTRAPPED
        self._log.debug(
            "bootstrapped", count=len(items), resource_version=result.resource_version
        )
        self._mark_changed()
        return True

    def resync(self) -> bool:
        """Re-list in place; the running watch is left alone."""
        self._log.info("resync_requested")
        return self.bootstrap()

    # =========================================================================
    # Watching
    # =========================================================================

    def start(self) -> None:
        """Spawn the reconcile thread. Calling it again is a no-op."""
        with self._lock:
            if self._started:
                self._log.debug("start_ignored", reason="already_started")
                return
            if self._cancel.is_set():
                self._log.debug("start_ignored", reason="stopped")
                return
            self._started = True
            self._state = SyncState.WATCHING
            self._thread = threading.Thread(
                target=self._reconcile,
                name=f"vigilant-watch-{self.resource_name}",
                daemon=True,
            )
        self._thread.start()
        self._log.info("watch_started", resource_version=self._resource_version)

    def _reconcile(self) -> None:
        """Apply watch events until cancelled or the stream ends."""
        try:
            stream = self._adapter.watch(self._resource_version)
        except Exception as e:
            self._log.error("watch_open_failed", error=str(e))
            return

        with self._lock:
            self._stream = stream
        if self._cancel.is_set():
            return

        received = 0
        try:
            for event in stream:
                if self._cancel.is_set():
                    break
                received += 1
                if self._apply(event):
                    self._mark_changed()
        except Exception as e:
            if received == 0:
                self._log.error("watch_open_failed", error=str(e))
            else:
                self._log.warning("watch_stream_failed", error=str(e), events=received)
            return
        finally:
            with self._lock:
                self._stream = None

        if self._cancel.is_set():
            self._log.debug("watch_cancelled", events=received)
        else:
            self._log.info("watch_stream_ended", events=received)

    def _apply(self, event: WatchEvent) -> bool:
        """Apply one event to the collection.

        Returns:
            True if the collection was mutated.
        """
        try:
            event_type = EventType(event.type)
        except ValueError:
            self._log.debug("event_skipped", reason="unhandled_type", type=event.type)
            return False

        obj = event.object
        if not isinstance(obj, self._adapter.object_type):
            self._log.warning(
                "event_skipped", reason="unexpected_object", type=type(obj).__name__
            )
            return False

        key = self._adapter.key_of(obj)
        if event_type is EventType.DELETED:
            self._collection.delete(key)
            return True

        try:
            projected = self._adapter.project(obj)
        except Exception as e:
            self._log.warning("event_skipped", reason="projection_failed", key=key, error=str(e))
            return False
        self._collection.set(key, projected)
        return True

    # =========================================================================
    # Shutdown
    # =========================================================================

    def stop(self) -> None:
        """Cancel the watch. Safe to repeat.

        Stopping before ``start()`` is final: a later ``start()`` does not
        open a watch. A reconcile thread blocked on the HTTP read exits on
        the next event or when the server-side watch timeout expires.
        """
        with self._lock:
            if self._state is SyncState.STOPPED:
                return
            self._state = SyncState.STOPPED
            self._cancel.set()
            stream = self._stream
        if stream is not None:
            stream.stop()
        self._log.info("watch_stopped")

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the reconcile thread to exit.

        Returns:
            True if no thread is running afterwards.
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()
