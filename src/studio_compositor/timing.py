"""
Module: timing

Purpose:
    Stage timing for compositing requests, so slow loads can be told
    apart from slow pixel work.

Key Classes:
    - TimingLog: Collects per-stage durations for one request

Key Functions:
    - timed_phase: Context manager for timing code blocks

Dependencies:
    - time (std)
    - contextlib (std)

Used By:
    - controller
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Stage durations for one request.

    Attributes:
        phases: Dict of phase_name -> duration_seconds

    Example:
        >>> log = TimingLog()
        >>> log.log("load", 0.120)
        >>> log.total
        0.12
    """
    phases: Dict[str, float] = field(default_factory=dict)

    def log(self, phase: str, duration: float) -> None:
        """Record a phase; repeated phases accumulate."""
        self.phases[phase] = self.phases.get(phase, 0.0) + duration

    @property
    def total(self) -> float:
        return sum(self.phases.values())

    def slowest(self) -> Optional[str]:
        """Name of the slowest phase, or None if nothing was logged."""
        if not self.phases:
            return None
        return max(self.phases.items(), key=lambda x: x[1])[0]

    def summary(self) -> str:
        """One-line human-readable summary."""
        parts = [f"{phase}={duration:.3f}s" for phase, duration in self.phases.items()]
        return f"total={self.total:.3f}s " + " ".join(parts)

    def to_dict(self) -> Dict[str, float]:
        return dict(self.phases)


@contextmanager
def timed_phase(log: Optional[TimingLog], phase: str) -> Generator[None, None, None]:
    """
    Time a block and record it in log (no-op recording when log is None).

    Example:
        >>> with timed_phase(log, "render"):
        ...     render(...)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        if log is not None:
            log.log(phase, duration)
        logger.debug(f"{phase} took {duration:.3f}s")
