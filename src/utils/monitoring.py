"""
Timing and memory tracking for parsing, matching and Sleeper API calls
"""
import functools
import json
import logging
import os
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import psutil

from config import DATA_DIR


logger = logging.getLogger(__name__)

SLOW_OPERATION_SECONDS = 5.0
LATEST_METRICS_FILE = "latest.json"


@dataclass
class OperationMetric:
    """One timed run of a named operation"""
    name: str
    started: float
    duration: float = 0.0
    success: bool = True
    error: Optional[str] = None
    rss_mb: float = 0.0
    rss_delta_mb: float = 0.0
    details: Dict[str, Any] = field(default_factory=dict)


class PerformanceMonitor:
    """Collects OperationMetrics for the lifetime of the process"""

    def __init__(self, metrics_dir: Optional[Path] = None):
        self.metrics: List[OperationMetric] = []
        self._lock = threading.Lock()
        self._process = psutil.Process(os.getpid())
        self.metrics_dir = metrics_dir or DATA_DIR / "metrics"

    def _rss_mb(self) -> float:
        try:
            return self._process.memory_info().rss / (1024 * 1024)
        except psutil.Error as e:
            logger.debug(f"Could not read process memory: {e}")
            return 0.0

    @contextmanager
    def measure(self, name: str, **details):
        """Time the enclosed block and record it, failed or not"""
        rss_before = self._rss_mb()
        metric = OperationMetric(name=name, started=time.time(), details=details)
        start = time.perf_counter()
        try:
            yield metric
        except Exception as e:
            metric.success = False
            metric.error = str(e)
            raise
        finally:
            metric.duration = time.perf_counter() - start
            metric.rss_mb = self._rss_mb()
            metric.rss_delta_mb = metric.rss_mb - rss_before
            with self._lock:
                self.metrics.append(metric)
            if metric.duration > SLOW_OPERATION_SECONDS:
                logger.warning(f"Slow operation: {name} took {metric.duration:.2f}s")

    def get_performance_summary(self) -> Dict[str, Dict[str, Any]]:
        """Count, failures and duration statistics per operation name"""
        with self._lock:
            grouped: Dict[str, List[OperationMetric]] = {}
            for metric in self.metrics:
                grouped.setdefault(metric.name, []).append(metric)

        summary = {}
        for name, runs in grouped.items():
            durations = [m.duration for m in runs]
            summary[name] = {
                'count': len(runs),
                'errors': sum(1 for m in runs if not m.success),
                'avg_duration': sum(durations) / len(durations),
                'max_duration': max(durations),
                'total_duration': sum(durations),
                'peak_rss_mb': max(m.rss_mb for m in runs),
            }
        return summary

    def log_summary(self):
        for name, stats in self.get_performance_summary().items():
            logger.info(
                f"{name}: {stats['count']} runs, {stats['errors']} errors, "
                f"avg {stats['avg_duration']:.3f}s, max {stats['max_duration']:.3f}s"
            )

    def _write(self, filename: str) -> Path:
        self.metrics_dir.mkdir(parents=True, exist_ok=True)
        path = self.metrics_dir / filename

        with self._lock:
            runs = [asdict(m) for m in self.metrics]
        with open(path, 'w') as f:
            json.dump({
                'exported': datetime.now().isoformat(),
                'operations': runs,
                'summary': self.get_performance_summary(),
            }, f, indent=2, default=str)
        return path

    def export_metrics(self, filename: Optional[str] = None) -> Path:
        """Write raw metrics and the summary to a JSON file under metrics_dir"""
        filename = filename or f"metrics_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        path = self._write(filename)
        logger.info(f"Exported metrics to {path}")
        return path

    def save_latest(self) -> Optional[Path]:
        """Keep this run's metrics on disk for a later ``metrics`` command"""
        if not self.metrics:
            return None
        try:
            return self._write(LATEST_METRICS_FILE)
        except OSError as e:
            logger.warning(f"Could not save metrics: {e}")
            return None

    def load_latest_summary(self) -> Dict[str, Dict[str, Any]]:
        """Summary saved by the last command run, or {} if there is none"""
        path = self.metrics_dir / LATEST_METRICS_FILE
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                return json.load(f).get('summary', {})
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read saved metrics {path}: {e}")
            return {}

    def clear_metrics(self):
        with self._lock:
            self.metrics.clear()
        latest = self.metrics_dir / LATEST_METRICS_FILE
        if latest.exists():
            latest.unlink()


monitor = PerformanceMonitor()


def measure_performance(name: Optional[str] = None) -> Callable:
    """Decorator form of ``monitor.measure``"""
    def decorator(func):
        metric_name = name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with monitor.measure(metric_name):
                return func(*args, **kwargs)
        return wrapper
    return decorator
