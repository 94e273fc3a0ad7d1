"""
Retry policy: exponential backoff with optional deterministic jitter.

Given the attempt number and the classified failure of that attempt, the
policy answers Retry(delay) or GiveUp(reason). It never sleeps itself, so
decisions are pure and reproducible:

    delay(n) = min(max_delay, base_delay * multiplier ** (n - 1)) * jitter_factor(n)

jitter_factor is drawn from a random.Random seeded with (seed, attempt),
so two policies with the same seed produce the same delays. A Retry-After
hint from the service replaces the computed delay.
"""

import random
from dataclasses import dataclass
from typing import Union

from release_hosting.retry.failures import ClassifiedFailure, Fatal


@dataclass(frozen=True)
class Retry:
    delay: float  # seconds


@dataclass(frozen=True)
class GiveUp:
    reason: str


RetryDecision = Union[Retry, GiveUp]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff.

    Attributes:
        max_attempts: Total attempts allowed, first one included
        base_delay: Delay before the second attempt (seconds)
        multiplier: Growth factor per attempt
        max_delay: Upper bound for any computed delay (seconds)
        jitter: Relative jitter, 0.25 = +/-25% (0 = none)
        seed: Seed for the jitter RNG
    """

    max_attempts: int = 4
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 30.0
    jitter: float = 0.0
    seed: int = 0

    def __post_init__(self) -> None:
        """Validate policy invariants."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("base_delay and max_delay must be >= 0")

        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

        if not 0 <= self.jitter < 1:
            raise ValueError("jitter must be in [0, 1)")

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        """Build a policy from Settings (RELEASE_HOSTING_MAX_ATTEMPTS, BACKOFF_*, JITTER*)."""
        return cls(
            max_attempts=settings.MAX_ATTEMPTS,
            base_delay=settings.BACKOFF_BASE,
            multiplier=settings.BACKOFF_MULTIPLIER,
            max_delay=settings.BACKOFF_MAX,
            jitter=settings.JITTER,
            seed=settings.JITTER_SEED,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Computed delay after failed attempt ``attempt`` (1-based)."""
        delay = min(self.max_delay, self.base_delay * self.multiplier ** (attempt - 1))

        if self.jitter > 0:
            rng = random.Random(f"{self.seed}:{attempt}")
            delay *= rng.uniform(1 - self.jitter, 1 + self.jitter)
            delay = min(self.max_delay, delay)

        return delay

    def next_action(self, attempt: int, failure: ClassifiedFailure) -> RetryDecision:
        """
        Decide what follows failed attempt ``attempt``.

        Args:
            attempt: 1-based number of the attempt that just failed
            failure: Its classification

        Returns:
            GiveUp for fatal failures or once max_attempts is reached,
            otherwise Retry with the delay to wait first
        """
        if isinstance(failure, Fatal):
            return GiveUp(f"fatal failure: {failure.reason.value}")

        if attempt >= self.max_attempts:
            return GiveUp(f"exhausted {self.max_attempts} attempt(s)")

        if failure.retry_after is not None:
            return Retry(failure.retry_after)

        return Retry(self.backoff_delay(attempt))
