import asyncio
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from loguru import logger

from argus_waiter.errors import (
    MalformedResponseError,
    OperationFailedError,
    TransportFailureError,
    WaitCancelledError,
    WaitTimeoutError,
)
from argus_waiter.models import Classification, WaitConfig, WaitStatus
from argus_waiter.poll_sources import PollSource

T = TypeVar("T")

_UNSET = object()


class WaitHandler(Generic[T]):
    """Polls a resource until it is classified as terminal or the deadline passes.

    A handler holds no state between calls to :meth:`wait`, so the same handler
    may be awaited from several tasks at once. Use :meth:`configure` to derive a
    handler with a different timeout or poll interval.

    Cancellation through ``cancel_event`` is checked before every poll and
    observed while fetching, sleeping and running ``on_status_change``. A
    representation fetched in the same step the event fires is still
    classified; if it is terminal, that outcome wins. The callback is bounded
    like a fetch: it may run until the deadline plus one poll interval.
    """

    def __init__(
        self,
        poll_source: PollSource[T],
        classifier: Callable[[T], Classification],
        config: Optional[WaitConfig] = None,
        on_status_change: Optional[Callable[[Classification], Awaitable[Any]]] = None,
        description: str = "resource",
    ):
        self.poll_source = poll_source
        self.classifier = classifier
        self.config = config or WaitConfig()
        self.on_status_change = on_status_change
        self.description = description
        self.logger = logger

    def configure(
        self, timeout: Optional[float] = None, poll_interval: Optional[float] = None
    ) -> "WaitHandler[T]":
        """Return a new handler with the given settings replaced"""
        settings = self.config.model_dump()
        if timeout is not None:
            settings["timeout"] = timeout
        if poll_interval is not None:
            settings["poll_interval"] = poll_interval

        return WaitHandler(
            self.poll_source,
            self.classifier,
            config=WaitConfig(**settings),
            on_status_change=self.on_status_change,
            description=self.description,
        )

    async def _race(
        self,
        coro: Awaitable[Any],
        deadline: float,
        attempts: int,
        cancel_event: Optional[asyncio.Event],
    ) -> "asyncio.Future[Any]":
        """Run coro until it finishes, the cancel event fires or the budget runs out.

        The budget is the time left until the deadline plus one poll interval.
        """
        loop = asyncio.get_event_loop()
        budget = max(deadline - loop.time(), 0.0) + self.config.poll_interval

        task = asyncio.ensure_future(coro)
        waiters = {task}
        cancelled = None
        if cancel_event is not None:
            cancelled = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancelled)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=budget, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if task in done:
            return task
        if cancelled is not None and cancelled in done:
            raise WaitCancelledError(description=self.description)
        raise WaitTimeoutError(self.config.timeout, attempts, description=self.description)

    async def _fetch_once(
        self, deadline: float, attempts: int, cancel_event: Optional[asyncio.Event]
    ) -> T:
        fetch = await self._race(
            self.poll_source.fetch(), deadline, attempts + 1, cancel_event
        )
        try:
            return fetch.result()
        except Exception as e:
            raise TransportFailureError(e, description=self.description) from e

    async def _sleep(self, delay: float, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await asyncio.sleep(delay)
            return

        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return
        raise WaitCancelledError(description=self.description)

    async def _handle_status_change(
        self,
        classification: Classification,
        last_token: Any,
        deadline: float,
        attempts: int,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        """Invoke the status change callback if the observed token has changed"""
        if classification.token == last_token:
            return
        self.logger.debug(f"{self.description} status changed to {classification.token}")
        if self.on_status_change is not None:
            # A cancel that fired during the fetch is reported after classification.
            if cancel_event is not None and cancel_event.is_set():
                cancel_event = None
            callback = await self._race(
                self.on_status_change(classification), deadline, attempts, cancel_event
            )
            callback.result()

    async def wait(self, cancel_event: Optional[asyncio.Event] = None) -> T:
        """Poll until the resource is terminal and return its final representation.

        Raises:
            WaitCancelledError: ``cancel_event`` was set before a terminal state.
            TransportFailureError: fetching the resource raised.
            OperationFailedError: the resource reported a failure status.
            MalformedResponseError: the representation could not be classified.
            WaitTimeoutError: the resource was still pending at the deadline.
        """
        loop = asyncio.get_event_loop()
        deadline = loop.time() + self.config.timeout
        attempts = 0
        last_token = _UNSET

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise WaitCancelledError(description=self.description)

            representation = await self._fetch_once(deadline, attempts, cancel_event)
            attempts += 1

            classification = self.classifier(representation)
            await self._handle_status_change(
                classification, last_token, deadline, attempts, cancel_event
            )
            last_token = classification.token

            if classification.status == WaitStatus.success:
                return representation
            if classification.status == WaitStatus.failure:
                raise OperationFailedError(classification.token, description=self.description)
            if classification.status == WaitStatus.malformed:
                raise MalformedResponseError(
                    classification.detail, description=self.description
                )

            remaining = deadline - loop.time()
            if remaining <= 0:
                raise WaitTimeoutError(
                    self.config.timeout, attempts, description=self.description
                )

            delay = min(self.config.poll_interval, remaining)
            self.logger.debug(
                f"{self.description} still pending ({classification.token}), "
                f"waiting {delay:.2f}s before poll {attempts + 1}"
            )
            await self._sleep(delay, cancel_event)
