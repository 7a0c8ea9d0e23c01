"""
Prometheus metrics exporter for event broker statistics.
"""

from __future__ import annotations

from typing import Any


def _line(metric: str, value: float, labels: dict[str, str] | None = None) -> str:
    if labels:
        parts = [f'{k}="{v}"' for k, v in labels.items()]
        label_str = "{" + ",".join(parts) + "}"
    else:
        label_str = ""
    return f"{metric}{label_str} {value}"


def build_prometheus_metrics(stats: dict[str, Any], prefix: str = "shopcore") -> str:
    """Render ``EventBroker.get_stats()`` output as Prometheus text."""
    lines: list[str] = []
    published = stats.get("published") or {}
    failed = stats.get("failed") or {}
    subscriptions = stats.get("subscriptions") or {}

    lines.append(f"# HELP {prefix}_events_published_total Events published per kind.")
    lines.append(f"# TYPE {prefix}_events_published_total counter")
    for kind in sorted(published):
        lines.append(_line(f"{prefix}_events_published_total", float(published[kind]), {"kind": kind}))

    lines.append(f"# HELP {prefix}_event_listener_failures_total Listener failures per kind.")
    lines.append(f"# TYPE {prefix}_event_listener_failures_total counter")
    for kind in sorted(failed):
        lines.append(_line(f"{prefix}_event_listener_failures_total", float(failed[kind]), {"kind": kind}))

    lines.append(f"# HELP {prefix}_event_subscriptions Registered listeners per kind.")
    lines.append(f"# TYPE {prefix}_event_subscriptions gauge")
    for kind in sorted(subscriptions):
        lines.append(_line(f"{prefix}_event_subscriptions", float(subscriptions[kind]), {"kind": kind}))

    lines.append(f"# HELP {prefix}_event_subscriptions_total Registered listeners across all kinds.")
    lines.append(f"# TYPE {prefix}_event_subscriptions_total gauge")
    lines.append(_line(f"{prefix}_event_subscriptions_total", float(stats.get("total_subscriptions", 0))))

    lines.append(f"# HELP {prefix}_event_tasks_pending Deferred listener tasks still running.")
    lines.append(f"# TYPE {prefix}_event_tasks_pending gauge")
    lines.append(_line(f"{prefix}_event_tasks_pending", float(stats.get("pending", 0))))

    return "\n".join(lines) + "\n"
