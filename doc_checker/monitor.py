# doc_checker/monitor.py
"""
External source monitor.

By default the checks are simulated: a check waits, then flips a coin for
"update detected". With a fetcher configured, a check downloads the source
URL and reports an update when the content hash differs from the last fetch.
"""
import asyncio
import hashlib
import logging
import random
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import requests

from doc_checker.errors import MonitorBusyError, SourceFetchError, UnknownSourceError
from doc_checker.models import ExternalSource
from doc_checker.pacing import Delay, no_delay

logger = logging.getLogger(__name__)

UPDATE_PROBABILITY = 0.5
AUTO_UPDATE_THRESHOLD = 0.8

Fetcher = Callable[[str], str]


def hash_text(t): return hashlib.sha256(t.encode()).hexdigest()


def http_fetcher(url: str) -> str:
    try:
        r = requests.get(url, timeout=5)
        r.raise_for_status()
    except requests.RequestException as e:
        raise SourceFetchError(f"Could not fetch {url}: {e}") from e
    return r.text


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_sources(now: Optional[datetime] = None) -> List[ExternalSource]:
    now = now or _utcnow()
    return [
        ExternalSource(
            id="college-rules",
            name="College Rules & Policies",
            url="https://college.edu/rules",
            last_checked=now - timedelta(hours=1),
            has_updates=True,
            content="Updated attendance policy: Minimum 70% attendance required (previously 75%)",
        ),
        ExternalSource(
            id="hr-handbook",
            name="HR Employee Handbook",
            url="https://company.com/hr-handbook",
            last_checked=now - timedelta(hours=2),
            has_updates=False,
            content="No recent changes detected",
        ),
    ]


class SourceMonitor:
    def __init__(self, sources: Optional[List[ExternalSource]] = None,
                 delay: Delay = no_delay, pause: Delay = no_delay,
                 rng: Optional[random.Random] = None,
                 fetcher: Optional[Fetcher] = None,
                 clock: Callable[[], datetime] = _utcnow):
        self._lock = threading.Lock()
        self._sources: Dict[str, ExternalSource] = {
            s.id: s for s in (default_sources(clock()) if sources is None else sources)
        }
        self._hashes: Dict[str, str] = {}
        self.delay = delay
        self.pause = pause
        self.rng = rng or random.Random()
        self.fetcher = fetcher
        self.clock = clock
        self.checking: Optional[str] = None

    def list_sources(self) -> List[ExternalSource]:
        with self._lock:
            return list(self._sources.values())

    def get_source(self, source_id: str) -> ExternalSource:
        with self._lock:
            try:
                return self._sources[source_id]
            except KeyError:
                raise UnknownSourceError(source_id) from None

    def _replace(self, source: ExternalSource):
        with self._lock:
            self._sources[source.id] = source

    async def check_source(self, source_id: str) -> ExternalSource:
        source = self.get_source(source_id)
        with self._lock:
            if self.checking is not None:
                raise MonitorBusyError(f"Already checking {self.checking}")
            self.checking = source_id
        try:
            await self.delay()
            if self.fetcher is None:
                has_updates, content = self._simulate()
            else:
                has_updates, content = await self._fetch(source)
            updated = self.get_source(source_id).model_copy(update={
                "last_checked": self.clock(),
                "has_updates": has_updates,
                "content": content,
            })
            self._replace(updated)
            logger.info("Checked %s: updates=%s", source_id, has_updates)
            return updated
        finally:
            with self._lock:
                self.checking = None

    def _simulate(self):
        if self.rng.random() > UPDATE_PROBABILITY:
            return True, f"New update detected: Policy changes as of {self.clock().date().isoformat()}"
        return False, "No new changes detected"

    async def _fetch(self, source: ExternalSource):
        text = await asyncio.to_thread(self.fetcher, source.url)
        h = hash_text(text)
        last = self._hashes.get(source.id)
        self._hashes[source.id] = h
        if last is None:
            return False, "Baseline recorded"
        if h != last:
            return True, f"Content changed since last check ({self.clock().date().isoformat()})"
        return False, "No new changes detected"

    async def check_all(self) -> List[ExternalSource]:
        """Check each source in turn; sources that hit a check already in flight are skipped."""
        checked = []
        for source in self.list_sources():
            try:
                checked.append(await self.check_source(source.id))
            except MonitorBusyError:
                logger.info("Skipped %s: another check is running", source.id)
                continue
            await self.pause()
        return checked

    def auto_tick(self) -> Optional[ExternalSource]:
        """Occasionally mark a random source as updated. Never clears a pending update."""
        sources = self.list_sources()
        if not sources:
            return None
        pick = self.rng.choice(sources)
        if self.checking is not None or self.rng.random() <= AUTO_UPDATE_THRESHOLD:
            return None
        updated = self.get_source(pick.id).model_copy(update={
            "has_updates": True,
            "content": f"Auto-detected update: {self.clock().strftime('%H:%M:%S')}",
        })
        self._replace(updated)
        logger.info("Auto-detected update on %s", pick.id)
        return updated


def start_auto_monitor(monitor: SourceMonitor, interval: float = 10) -> threading.Event:
    """Run `auto_tick` every `interval` seconds on a daemon thread; set the returned event to stop."""
    stop = threading.Event()

    def loop():
        while not stop.wait(interval):
            monitor.auto_tick()

    t = threading.Thread(target=loop, daemon=True, name="source-monitor")
    t.start()
    return stop
