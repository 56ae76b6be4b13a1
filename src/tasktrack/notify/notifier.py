"""Change notifier - fan-out of task events to live connections."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from tasktrack.config import settings
from tasktrack.models import EventType, Task, TaskUpdateResult
from tasktrack.notify.registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    """One outbound event.

    With no target_user_id the event is broadcast to every connection.
    """

    type: EventType
    payload: dict[str, Any]
    target_user_id: Optional[str] = None
    exclude_connection_id: Optional[str] = None

    def frame(self) -> dict[str, Any]:
        return {"event": self.type.value, "data": self.payload}


def assignment_message(task: Task) -> str:
    return f"You have been assigned to task: {task.title}"


class ChangeNotifier:
    """
    Best-effort publisher for task events.

    Mutation handlers call ``publish`` (or the task_* helpers), which only
    enqueues. A background dispatcher drains the queue and delivers each
    event concurrently to its target connections. A failing or slow
    connection never blocks the others and never surfaces to the publisher.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        queue_size: Optional[int] = None,
        send_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.send_timeout = send_timeout or settings.notifier_send_timeout_seconds
        self._queue: asyncio.Queue[NotificationEvent] = asyncio.Queue(
            maxsize=queue_size or settings.notifier_queue_size
        )
        self._dispatcher: Optional[asyncio.Task] = None
        self._shutdown_event: Optional[asyncio.Event] = None

        self.delivered = 0
        self.failed = 0
        self.dropped = 0

    # =========================================================================
    # Publishing (non-blocking)
    # =========================================================================

    def publish(self, event: NotificationEvent) -> bool:
        """Enqueue an event. Returns False if it had to be dropped."""
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Notification queue full, dropping {event.type.value} event")
            return False
        return True

    def task_created(self, task: Task) -> None:
        self.publish(NotificationEvent(EventType.TASK_CREATED, task.model_dump(mode="json")))

    def task_updated(self, result: TaskUpdateResult) -> None:
        """Broadcast the update; also tell the new assignee if there is one."""
        task_data = result.task.model_dump(mode="json")
        self.publish(NotificationEvent(EventType.TASK_UPDATED, task_data))

        # Unassigning (new assignee null) only gets the broadcast.
        if result.was_reassigned and result.new_assignee_id:
            self.publish(
                NotificationEvent(
                    EventType.TASK_ASSIGNED,
                    {"task": task_data, "message": assignment_message(result.task)},
                    target_user_id=result.new_assignee_id,
                )
            )

    def task_deleted(self, task_id: str) -> None:
        self.publish(NotificationEvent(EventType.TASK_DELETED, {"task_id": task_id}))

    def user_typing(self, connection: Connection, task_id: Optional[str]) -> None:
        """Relay a typing indicator to every other connection."""
        self.publish(
            NotificationEvent(
                EventType.USER_TYPING,
                {"user_id": connection.user_id, "task_id": task_id},
                exclude_connection_id=connection.connection_id,
            )
        )

    def relay_task_update(self, connection: Connection, data: dict[str, Any]) -> None:
        """Rebroadcast a client-sent task change to every connection, sender included."""
        logger.debug(f"Relaying task update from connection {connection.connection_id}")
        self.publish(NotificationEvent(EventType.TASK_UPDATED, data))

    def pending(self) -> int:
        return self._queue.qsize()

    # =========================================================================
    # Delivery
    # =========================================================================

    def _targets(self, event: NotificationEvent) -> list[Connection]:
        if event.target_user_id is not None:
            connections = self.registry.connections_for(event.target_user_id)
        else:
            connections = self.registry.all_connections()
        if event.exclude_connection_id:
            connections = [
                c for c in connections if c.connection_id != event.exclude_connection_id
            ]
        return connections

    async def _send(self, connection: Connection, frame: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(connection.send_json(frame), timeout=self.send_timeout)
        except Exception as e:
            self.failed += 1
            logger.warning(
                f"Failed to deliver {frame['event']} to connection "
                f"{connection.connection_id} (user {connection.user_id}): {e!r}"
            )
            return False
        self.delivered += 1
        return True

    async def dispatch(self, event: NotificationEvent) -> int:
        """Deliver one event now. Returns the number of successful sends."""
        targets = self._targets(event)
        if not targets:
            return 0

        frame = event.frame()
        results = await asyncio.gather(*(self._send(c, frame) for c in targets))
        return sum(1 for ok in results if ok)

    async def flush(self) -> int:
        """Deliver everything currently queued."""
        delivered = 0
        while not self._queue.empty():
            event = self._queue.get_nowait()
            try:
                delivered += await self.dispatch(event)
            finally:
                self._queue.task_done()
        return delivered

    # =========================================================================
    # Background dispatcher
    # =========================================================================

    async def _next_event(self) -> Optional[NotificationEvent]:
        """Wait for a queued event or for shutdown, whichever comes first.

        Returns None on shutdown. An event already taken off the queue is
        always returned, never discarded.
        """
        getter = asyncio.ensure_future(self._queue.get())
        stopper = asyncio.ensure_future(self._shutdown_event.wait())
        try:
            await asyncio.wait({getter, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            if not getter.done():
                getter.cancel()

        # A cancelled get leaves its item on the queue for flush()
        await asyncio.wait({getter})
        if getter.cancelled():
            return None
        return getter.result()

    async def _dispatch_loop(self) -> None:
        logger.info("Notification dispatcher started")

        while not self._shutdown_event.is_set():
            event = await self._next_event()
            if event is None:
                continue

            try:
                await self.dispatch(event)
            except Exception as e:
                logger.error(f"Notification dispatch error: {e}", exc_info=True)
            finally:
                self._queue.task_done()

        logger.info("Notification dispatcher stopped")

    @property
    def running(self) -> bool:
        return self._dispatcher is not None and not self._dispatcher.done()

    async def start(self) -> None:
        """Start the background dispatcher."""
        if self.running:
            return
        self._shutdown_event = asyncio.Event()
        self._dispatcher = asyncio.create_task(self._dispatch_loop())

    async def stop(self) -> None:
        """Stop the dispatcher and deliver whatever is still queued."""
        if self._shutdown_event:
            self._shutdown_event.set()

        if self._dispatcher:
            try:
                await asyncio.wait_for(self._dispatcher, timeout=10.0)
            except asyncio.TimeoutError:
                logger.warning("Notification dispatcher did not stop gracefully, cancelling")
                self._dispatcher.cancel()
                try:
                    await self._dispatcher
                except asyncio.CancelledError:
                    pass

        self._dispatcher = None
        self._shutdown_event = None
        await self.flush()
