"""
Failure counters for the HTTP layer.

The collector is created by the application factory and handed to route
handlers as a dependency, so nothing in here is process-global.
"""
import logging
from threading import Lock
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

ERROR_500_COUNTER = "cart_error_500_counter"

HELP_TEXT = {
    ERROR_500_COUNTER: "Counter of 500 responses of cart api",
}


class MetricsSink(Protocol):
    def increment(self, name: str, value: int = 1, labels: Dict[str, str] = None) -> None:
        ...


class MetricsCollector:
    """In-memory counters keyed by name and label set."""

    def __init__(self):
        self._counters: Dict[str, Dict[tuple, int]] = {}
        self._lock = Lock()

    @staticmethod
    def _label_key(labels: Optional[Dict[str, str]]) -> tuple:
        return tuple(sorted((labels or {}).items()))

    def increment(self, name: str, value: int = 1, labels: Dict[str, str] = None) -> None:
        key = self._label_key(labels)
        with self._lock:
            series = self._counters.setdefault(name, {})
            series[key] = series.get(key, 0) + value

    def get_counter(self, name: str, labels: Dict[str, str] = None) -> int:
        with self._lock:
            return self._counters.get(name, {}).get(self._label_key(labels), 0)

    def render_prometheus(self) -> str:
        """Export counters in Prometheus text format."""
        lines = []
        with self._lock:
            snapshot = {name: dict(series) for name, series in self._counters.items()}

        for name in sorted(snapshot):
            if name in HELP_TEXT:
                lines.append(f"# HELP {name} {HELP_TEXT[name]}")
            lines.append(f"# TYPE {name} counter")
            for label_key, value in sorted(snapshot[name].items()):
                if label_key:
                    label_str = ",".join(f'{k}="{v}"' for k, v in label_key)
                    lines.append(f"{name}{{{label_str}}} {value}")
                else:
                    lines.append(f"{name} {value}")

        return "\n".join(lines) + "\n" if lines else ""
