"""Retry delays for re-establishing a broken file watch.

Crash restarts never use this: every crash waits the same fixed cooldown.
Only the notifier backs off, so a watcher that keeps failing does not spin.
"""

import random
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff calculator with jitter.

    The delay formula is:
        delay = min(base * (multiplier ^ attempt), max_delay)
        delay = delay +/- delay * jitter / 2

    Attributes:
        base: Delay in seconds before the first retry.
        max_delay: Upper bound in seconds.
        multiplier: Growth factor per attempt.
        jitter: Fraction of the delay to randomize (0.0-1.0).
    """

    base: float = 0.5
    max_delay: float = 30.0
    multiplier: float = 2.0
    jitter: float = 0.1

    def delay(self, attempt: int) -> float:
        """Calculate the delay before retry number `attempt` (0-indexed).

        Args:
            attempt: How many retries have already happened.

        Returns:
            The delay in seconds.
        """
        capped = min(self.base * (self.multiplier**attempt), self.max_delay)

        if self.jitter > 0:
            spread = capped * self.jitter
            capped = max(0.0, capped + random.uniform(-spread / 2, spread / 2))  # noqa: S311

        return capped
