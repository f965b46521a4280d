"""
Periodic background polling.

The timer ticks every ``interval`` seconds (and once right away). Each tick
starts a poll unless the previous one is still in flight, in which case the
tick is dropped. Everything runs on one event loop, so a plain boolean is
enough to keep polls from overlapping.

Every start() opens a new generation. A poll left over from an earlier
generation neither blocks the new timer nor delivers its result.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .constants import DEFAULT_POLL_INTERVAL

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class StatePoller(Generic[T]):
    def __init__(
        self,
        poll: Callable[[], Awaitable[T]],
        on_result: Optional[Callable[[T], None]] = None,
        interval: float = DEFAULT_POLL_INTERVAL,
        name: str = "pimalink",
    ):
        self._poll = poll
        self._on_result = on_result
        self.interval = interval
        self.name = name

        self._polling = False
        self._stopped = False
        self._generation = 0
        self._timer_task: asyncio.Task | None = None
        self._poll_tasks: set[asyncio.Task] = set()

    @property
    def is_polling(self) -> bool:
        return self._polling

    @property
    def is_running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def start(self) -> None:
        """Start ticking. No-op if already running."""
        if self.is_running:
            return
        self._generation += 1
        self._stopped = False
        self._polling = False
        self._timer_task = asyncio.create_task(self._run_timer())
        _LOGGER.debug("(%s) Poller started, interval %ss", self.name, self.interval)

    async def stop(self) -> None:
        """
        Stop the timer.

        A poll already in flight is left to finish; its result is dropped.
        """
        self._stopped = True
        self._polling = False
        if self._timer_task:
            self._timer_task.cancel()
            try:
                await self._timer_task
            except asyncio.CancelledError:
                pass
            self._timer_task = None
            _LOGGER.debug("(%s) Poller stopped", self.name)

    async def _run_timer(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self.interval)

    def tick(self) -> asyncio.Task | None:
        """Start one poll, unless one is running or the poller was stopped."""
        if self._stopped:
            return None
        if self._polling:
            _LOGGER.debug("(%s) Previous poll still running, skipping tick", self.name)
            return None

        self._polling = True
        task = asyncio.create_task(self._run_poll(self._generation))
        self._poll_tasks.add(task)
        task.add_done_callback(self._poll_tasks.discard)
        return task

    def _is_current(self, generation: int) -> bool:
        return not self._stopped and generation == self._generation

    async def _run_poll(self, generation: int) -> None:
        try:
            result = await self._poll()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            _LOGGER.warning("(%s) Poll failed: %s", self.name, e, exc_info=True)
            return
        finally:
            if generation == self._generation:
                self._polling = False

        if not self._is_current(generation):
            _LOGGER.debug("(%s) Poller stopped or restarted, discarding poll result", self.name)
            return
        if self._on_result is None:
            return
        try:
            self._on_result(result)
        except Exception as e:
            _LOGGER.warning("(%s) Result handler failed: %s", self.name, e, exc_info=True)
