"""Centralized timer service for TOTP code updates.

One shared clock drives every registered token instead of one timer per
token. Each tick recomputes the seconds remaining once per distinct period
and regenerates a token's code only when its period boundary has been
crossed, then emits a single tick signal for all observers.

The service is confined to one asyncio event loop: registration, visibility
signals and ticks all run on it, and a tick never awaits, so observers never
see a half-updated cache.
"""

import asyncio
import time
from typing import Callable, Dict, List, Optional

from loguru import logger

from keyden.models import CacheEntry, Token
from keyden.otp.generator import CodeGenerator, remaining_seconds

TickCallback = Callable[[int], None]


class TOTPTimerService:
    """Shared clock and per-token code cache.

    The clock only runs while a view wants updates (``should_run``) and at
    least one token is registered.

    Attributes:
        generator: CodeGenerator used to compute codes.
        clock: Callable returning the current POSIX time in seconds.
        interval: Seconds between physical ticks.
        placeholder: Code shown when generation fails.
    """

    def __init__(
        self,
        generator: Optional[CodeGenerator] = None,
        clock: Callable[[], float] = time.time,
        interval: float = 1.0,
        placeholder: str = "------",
    ):
        """Initialize the timer service.

        Args:
            generator: Code generator (default: pyotp-backed CodeGenerator).
            clock: Time source in POSIX seconds (default: time.time).
            interval: Seconds between ticks (default 1.0).
            placeholder: Code shown for tokens whose secret cannot be used.
        """
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")

        self.generator = generator or CodeGenerator()
        self.clock = clock
        self.interval = interval
        self.placeholder = placeholder

        self._tokens: Dict[str, Token] = {}
        self._cache: Dict[str, CacheEntry] = {}
        self._subscribers: List[TickCallback] = []
        self._tick_count = 0

        self._should_run = False
        self._is_active = False
        self._task: Optional[asyncio.Task] = None

    @property
    def tick_count(self) -> int:
        """Number of completed ticks; increments once per tick."""
        return self._tick_count

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def should_run(self) -> bool:
        return self._should_run

    @property
    def registered_ids(self) -> List[str]:
        return list(self._tokens)

    # -------------------------------------------------------------------------
    # Timer control
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start the shared clock if there is demand and something to update.

        Must be called from within a running event loop.
        """
        if not self._should_run or self._is_active or not self._tokens:
            return

        loop = asyncio.get_running_loop()
        self._is_active = True
        self.update_all_codes()
        self._task = loop.create_task(self._run())
        logger.debug(f"TOTP clock started for {len(self._tokens)} tokens")

    def stop(self) -> None:
        """Stop the shared clock. Safe to call when already stopped."""
        was_active = self._is_active
        self._is_active = False
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if was_active:
            logger.debug("TOTP clock stopped")

    def on_visibility_show(self) -> None:
        """A view showing codes became visible.

        Starts the clock when tokens are registered, which requires a running
        event loop; calling this from synchronous code with tokens registered
        raises RuntimeError.
        """
        self._should_run = True
        self.start()

    def on_visibility_hide(self) -> None:
        """The last view showing codes was hidden."""
        self._should_run = False
        self.stop()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not self._is_active:
                break
            self.tick()

    # -------------------------------------------------------------------------
    # Token registration
    # -------------------------------------------------------------------------

    def register(self, token: Token) -> None:
        """Register a token, or replace a previous registration with its id.

        The code and remaining seconds are computed immediately so a view can
        display them before the first tick.

        While a view is visible this also starts the clock, so it must then be
        called from within a running event loop (RuntimeError otherwise).
        """
        now = self.clock()
        now_seconds = int(now)
        period = token.period

        self._tokens[token.id] = token
        self._cache[token.id] = CacheEntry(
            code=self._generate(token, now),
            remaining_seconds=remaining_seconds(now_seconds, period),
            period=period,
        )
        self.start()

    def unregister(self, token_id: str) -> None:
        """Unregister a token. Stops the clock when no tokens remain."""
        self._tokens.pop(token_id, None)
        self._cache.pop(token_id, None)
        if not self._tokens:
            self.stop()

    def get_cached_data(self, token_id: str) -> Optional[CacheEntry]:
        """Get cached code and remaining seconds for a token.

        Returns:
            CacheEntry, or None if the token is not registered.
        """
        return self._cache.get(token_id)

    # -------------------------------------------------------------------------
    # Tick observation
    # -------------------------------------------------------------------------

    def subscribe(self, callback: TickCallback) -> Callable[[], None]:
        """Call `callback(tick_count)` once after every tick.

        Returns:
            Function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._tick_count)
            except Exception as e:
                logger.error(f"Tick subscriber {callback!r} failed: {e}")

    # -------------------------------------------------------------------------
    # Tick logic
    # -------------------------------------------------------------------------

    def tick(self) -> None:
        """Process one clock firing.

        Updates every cache entry, then increments the tick counter and
        notifies subscribers once.
        """
        self.update_all_remaining_seconds()
        self._tick_count += 1
        self._notify()

    def update_all_remaining_seconds(self) -> None:
        """Update remaining seconds for all registered tokens.

        Only regenerates a code when its period boundary is crossed.
        """
        now = self.clock()
        now_seconds = int(now)
        remaining_by_period: Dict[int, int] = {}

        for token_id, token in self._tokens.items():
            entry = self._cache.get(token_id)
            if entry is None:
                continue

            period = token.period
            new_remaining = remaining_by_period.get(period)
            if new_remaining is None:
                new_remaining = remaining_seconds(now_seconds, period)
                remaining_by_period[period] = new_remaining

            # Remaining jumps back up (e.g. 1 -> 30) right after a rotation.
            if (
                new_remaining > entry.remaining_seconds
                or entry.remaining_seconds == period
            ):
                entry.code = self._generate(token, now)

            entry.remaining_seconds = new_remaining

    def update_all_codes(self) -> None:
        """Recompute every code and remaining seconds from the current time."""
        now = self.clock()
        now_seconds = int(now)
        remaining_by_period: Dict[int, int] = {}

        for token_id, token in self._tokens.items():
            period = token.period
            remaining = remaining_by_period.get(period)
            if remaining is None:
                remaining = remaining_seconds(now_seconds, period)
                remaining_by_period[period] = remaining

            self._cache[token_id] = CacheEntry(
                code=self._generate(token, now),
                remaining_seconds=remaining,
                period=period,
            )

    def _generate(self, token: Token, now: float) -> str:
        code = self.generator.generate(
            token.secret, token.digits, token.period, token.algorithm, now
        )
        if code is None:
            logger.debug(f"Using placeholder code for token {token.id}")
            return self.placeholder
        return code
