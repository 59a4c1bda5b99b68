"""
Timer-driven refresh for views.

A Poller re-runs a fetch coroutine on a fixed interval until it is stopped.
CampaignView wires the landing-page pollers (stats, campaign, countdown)
to one state object whose lifetime bounds theirs.
"""
import asyncio
import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from . import config, errors
from .client import CampaignClient
from .stats import Countdown, compute_countdown

logger = logging.getLogger(__name__)


class Poller:
    """Call fetch() every `interval` seconds and hand the result to on_update.

    Errors raised by fetch or on_update go to on_error (or the log) and the
    next tick still fires; there is no backoff. stop() cancels the pending tick.
    """

    def __init__(self, fetch: Callable[[], Awaitable[Any]], interval: float,
                 on_update: Callable[[Any], None], on_error: Optional[Callable[[Exception], None]] = None):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetch = fetch
        self.interval = interval
        self.on_update = on_update
        self.on_error = on_error
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self):
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, *exc):
        await self.stop()

    async def poll_once(self):
        try:
            self.on_update(await self.fetch())
        except Exception as e:
            if self.on_error is not None:
                self.on_error(e)
            elif isinstance(e, errors.FundraiserError):
                logger.warning("Poll failed: %s", e.message)
            else:
                logger.exception("Poll failed")

    async def _run(self):
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)


def _parse_datetime(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    return datetime.datetime.fromisoformat(value.replace('Z', '+00:00'))


@dataclass
class CampaignView:
    """Landing-page state refreshed by polling while the view is open."""
    client: CampaignClient
    stats: Dict[str, Any] = field(default_factory=dict)
    campaign: Optional[Dict[str, Any]] = None
    countdown: Countdown = field(default_factory=Countdown)
    last_error: Optional[Exception] = None
    stats_interval: float = field(default_factory=config.stats_poll_interval)
    campaign_interval: float = field(default_factory=config.donations_poll_interval)
    countdown_interval: float = config.COUNTDOWN_INTERVAL
    _pollers: List[Poller] = field(default_factory=list, repr=False)

    def _set_stats(self, value):
        self.stats = value
        self.last_error = None

    def _set_campaign(self, value):
        self.campaign = value
        self.last_error = None

    def _set_countdown(self, value):
        self.countdown = value

    def _set_error(self, exc):
        self.last_error = exc

    async def _countdown(self):
        end_date = _parse_datetime((self.campaign or {}).get('endDate'))
        return compute_countdown(end_date)

    async def open(self):
        self._pollers = [
            Poller(self.client.get_stats, self.stats_interval, self._set_stats, self._set_error),
            Poller(self.client.get_campaign, self.campaign_interval, self._set_campaign, self._set_error),
            Poller(self._countdown, self.countdown_interval, self._set_countdown, self._set_error),
        ]
        for p in self._pollers:
            p.start()

    async def close(self):
        for p in self._pollers:
            await p.stop()
        self._pollers = []

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, *exc):
        await self.close()
