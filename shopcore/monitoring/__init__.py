"""
Monitoring module for shopcore.

Exposes event broker statistics in Prometheus text format.
"""

from shopcore.monitoring.prometheus import build_prometheus_metrics

__all__ = ["build_prometheus_metrics"]
