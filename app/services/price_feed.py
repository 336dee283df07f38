"""
Polling client for the public price list.
Re-fetches /api/prices on an interval with request de-duplication, a per-request
timeout and a bounded number of error retries, and exposes loading/error/empty/ready state.
"""
from enum import Enum
from typing import Any, Callable, List, Optional
import argparse
import asyncio
import logging
import sys
import time

import httpx

logger = logging.getLogger(__name__)


class FeedState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


class PricePoller:
    """
    Keeps a fresh copy of the price list.

    Requests started within `dedupe_interval` seconds of the previous one are
    not sent again: callers share the in-flight request or get the cached data.
    Overlapping calls are suppressed, never cancelled.
    """

    def __init__(
        self,
        base_url: str = "",
        category_id: Optional[int] = None,
        refresh_interval: float = 60.0,
        dedupe_interval: float = 2.0,
        timeout: float = 10.0,
        error_retry_count: int = 3,
        error_retry_interval: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.path = "/api/prices" if category_id is None else f"/api/prices?categoryId={category_id}"
        self.refresh_interval = refresh_interval
        self.dedupe_interval = dedupe_interval
        self.timeout = timeout
        self.error_retry_count = error_retry_count
        self.error_retry_interval = error_retry_interval
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._clock = clock

        self.data: Optional[List[Any]] = None
        self.error: Optional[Exception] = None
        self.is_loading = False
        self.request_count = 0
        self._retries = 0
        self._last_started: Optional[float] = None
        self._inflight: Optional[asyncio.Task] = None
        self._stopped = asyncio.Event()

    @property
    def state(self) -> FeedState:
        if self.data is None and self.error is None:
            return FeedState.LOADING
        if self.error is not None:
            return FeedState.ERROR
        if not self.data:
            return FeedState.EMPTY
        return FeedState.READY

    async def fetch(self, force: bool = False) -> Optional[List[Any]]:
        """
        Fetch the price list unless a request is in flight or was just made.
        `force` skips the de-duplication window but still joins an in-flight request.
        """
        if self._inflight is not None and not self._inflight.done():
            return await asyncio.shield(self._inflight)

        now = self._clock()
        if not force and self._last_started is not None and now - self._last_started < self.dedupe_interval:
            logger.debug(f"Skipping duplicate price fetch ({now - self._last_started:.2f}s since last)")
            return self.data

        self._last_started = now
        self._inflight = asyncio.ensure_future(self._request())
        return await asyncio.shield(self._inflight)

    async def _request(self) -> Optional[List[Any]]:
        self.is_loading = True
        self.request_count += 1
        try:
            response = await self._client.get(self.path, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"Unexpected price payload: {type(payload).__name__}")
        except (httpx.HTTPError, ValueError) as e:
            # Last good data stays available alongside the error
            logger.warning(f"Price fetch failed: {type(e).__name__}: {str(e)}")
            self.error = e
            return self.data
        finally:
            self.is_loading = False

        self.data = list(payload.get("data") or [])
        self.error = None
        self._retries = 0
        logger.debug(f"Fetched {len(self.data)} prices")
        return self.data

    async def retry(self) -> Optional[List[Any]]:
        """User-triggered re-fetch after an error."""
        self._retries = 0
        return await self.fetch(force=True)

    def next_delay(self) -> float:
        """Seconds to wait before the next poll, retrying errors first."""
        if self.error is not None and self._retries < self.error_retry_count:
            self._retries += 1
            return self.error_retry_interval
        return self.refresh_interval

    async def run(
        self,
        max_cycles: Optional[int] = None,
        on_update: Optional[Callable[["PricePoller"], None]] = None,
    ):
        """
        Poll until stop() is called (or max_cycles fetches have been made).
        `on_update` is called with the poller after every fetch.
        """
        self._stopped.clear()
        cycles = 0
        while not self._stopped.is_set():
            await self.fetch(force=True)
            if on_update is not None:
                on_update(self)
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.next_delay())
            except asyncio.TimeoutError:
                pass

    def stop(self):
        self._stopped.set()

    async def aclose(self):
        self.stop()
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PricePoller":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


def format_status(poller: PricePoller) -> str:
    """One status line for the current feed state."""
    state = poller.state
    if state is FeedState.ERROR:
        kept = f", keeping {len(poller.data)} cached" if poller.data else ""
        return f"[error] {type(poller.error).__name__}: {poller.error}{kept}"
    if state is FeedState.EMPTY:
        return "[empty] No prices published"
    if state is FeedState.READY:
        return f"[ready] {len(poller.data)} price tier(s)"
    return "[loading]"


async def watch(poller: PricePoller, max_cycles: Optional[int] = None) -> PricePoller:
    """Run the poller, printing a status line after every fetch, then close it."""
    async with poller:
        await poller.run(max_cycles=max_cycles, on_update=lambda p: print(format_status(p)))
    return poller


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dolly-price-feed",
        description="Poll the Dolly Hotel price list and report its state",
    )
    parser.add_argument("base_url", help="API base URL, e.g. http://localhost:8000")
    parser.add_argument("--category-id", type=int, default=None, help="Only poll one room category")
    parser.add_argument("--interval", type=float, default=60.0, help="Refresh interval in seconds")
    parser.add_argument("--cycles", type=int, default=None, help="Stop after this many fetches")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    poller = PricePoller(
        base_url=args.base_url,
        category_id=args.category_id,
        refresh_interval=args.interval,
    )
    try:
        asyncio.run(watch(poller, args.cycles))
    except KeyboardInterrupt:
        print("\nStopped")
    return 1 if poller.state is FeedState.ERROR else 0


if __name__ == "__main__":
    sys.exit(main())
