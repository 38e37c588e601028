"""
Metrics collection for crawl and search activity.
"""

import time
import logging
from typing import Dict, Optional, Any

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
from prometheus_client import start_http_server


class MetricsCollector:
    """
    Prometheus metrics in a private registry plus plain current values.

    Each collector owns its registry so several indexers (or tests) can
    live in one process.
    """

    def __init__(self, prometheus_port: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        self.prometheus_port = prometheus_port
        self.registry = CollectorRegistry()
        self.current_values: Dict[str, float] = {}

        self.prometheus_metrics = {
            'pages_crawled_total': Counter(
                'site_indexer_pages_crawled_total',
                'Pages fetched and kept',
                registry=self.registry
            ),
            'pages_skipped_total': Counter(
                'site_indexer_pages_skipped_total',
                'Pages fetched but discarded',
                ['reason'],
                registry=self.registry
            ),
            'errors_total': Counter(
                'site_indexer_errors_total',
                'Per-URL crawl errors',
                ['error_type'],
                registry=self.registry
            ),
            'documents_indexed_total': Counter(
                'site_indexer_documents_indexed_total',
                'Documents added to the index',
                registry=self.registry
            ),
            'searches_total': Counter(
                'site_indexer_searches_total',
                'Queries served',
                registry=self.registry
            ),
            'fetch_seconds': Histogram(
                'site_indexer_fetch_seconds',
                'Time spent fetching and extracting a page',
                registry=self.registry
            ),
            'queue_size': Gauge(
                'site_indexer_queue_size',
                'URLs waiting in the frontier',
                registry=self.registry
            ),
        }

    def start_prometheus_server(self):
        """Expose the registry over HTTP when a port is configured."""
        if self.prometheus_port is None:
            return
        start_http_server(self.prometheus_port, registry=self.registry)
        self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")

    def increment_counter(self, name: str, labels: Optional[Dict[str, str]] = None, amount: float = 1):
        """Increment a counter metric."""
        metric = self.prometheus_metrics[name]
        if labels:
            metric.labels(**labels).inc(amount)
            key = f"{name}{{{','.join(f'{k}={v}' for k, v in sorted(labels.items()))}}}"
        else:
            metric.inc(amount)
            key = name
        self.current_values[key] = self.current_values.get(key, 0) + amount

    def set_gauge(self, name: str, value: float):
        """Set a gauge metric value."""
        self.prometheus_metrics[name].set(value)
        self.current_values[name] = value

    def observe_histogram(self, name: str, value: float):
        """Record a histogram observation."""
        self.prometheus_metrics[name].observe(value)
        self.current_values[name] = value

    def get_current_values(self) -> Dict[str, float]:
        return dict(self.current_values)

    def export_text(self) -> str:
        """Prometheus text exposition of the registry."""
        return generate_latest(self.registry).decode('utf-8')


class CrawlerMonitor:
    """High-level monitoring interface for the indexer."""

    def __init__(self, metrics_collector: Optional[MetricsCollector] = None):
        self.metrics = metrics_collector or MetricsCollector()
        self.start_time = time.time()

    def record_page_crawled(self, url: str, fetch_time: float):
        self.metrics.increment_counter('pages_crawled_total')
        self.metrics.observe_histogram('fetch_seconds', fetch_time)

    def record_page_skipped(self, url: str, reason: str):
        self.metrics.increment_counter('pages_skipped_total', {'reason': reason})

    def record_error(self, error_type: str):
        self.metrics.increment_counter('errors_total', {'error_type': error_type})

    def record_documents_indexed(self, count: int):
        if count:
            self.metrics.increment_counter('documents_indexed_total', amount=count)

    def record_search(self):
        self.metrics.increment_counter('searches_total')

    def update_queue_size(self, size: int):
        self.metrics.set_gauge('queue_size', size)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        current_values = self.metrics.get_current_values()
        runtime = time.time() - self.start_time
        return {
            'runtime_seconds': runtime,
            'metrics': current_values,
            'pages_per_minute': (
                current_values.get('pages_crawled_total', 0) / (runtime / 60) if runtime > 0 else 0
            )
        }
