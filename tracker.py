"""Cumulative occupancy score per resource name.

Each resource keeps a running sum of occupancy fractions and an observation
count for the life of the process. There is no decay or windowing, so the
score settles towards the long-run mean as observations accumulate.
"""
import threading
from typing import Dict, List


class ScoreTracker:
    """Thread-safe running mean of occupancy fractions, keyed by resource name.

    Observations from every node are mixed into one mean per resource, so
    the score is a fleet-wide figure rather than a per-node one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # resource -> [running_sum, observation_count]
        self._state: Dict[str, List[float]] = {}

    def score(self, resource: str, fraction: float) -> float:
        """Record one occupancy fraction (0..1) and return the mean as a percentage."""
        with self._lock:
            entry = self._state.get(resource)
            if entry is None:
                entry = [fraction, 1]
                self._state[resource] = entry
            else:
                entry[0] += fraction
                entry[1] += 1
            return 100.0 * entry[0] / entry[1]

    def observations(self, resource: str) -> int:
        with self._lock:
            entry = self._state.get(resource)
            return int(entry[1]) if entry else 0

    def snapshot(self) -> Dict[str, float]:
        """Current mean percentage for every resource seen so far."""
        with self._lock:
            return {name: 100.0 * s / n for name, (s, n) in self._state.items()}
