from shopcore.events import EventBroker, EventKind
from shopcore.events.payloads import OrderCreated
from shopcore.monitoring import build_prometheus_metrics


def test_prometheus_metrics_from_broker_stats():
    broker = EventBroker()
    broker.subscribe(EventKind.ORDER_CREATED, lambda payload: None)

    def explode(payload):
        raise RuntimeError("boom")

    broker.subscribe(EventKind.ORDER_CREATED, explode)
    broker.publish(EventKind.ORDER_CREATED, OrderCreated(order_id="o1"))

    text = build_prometheus_metrics(broker.get_stats())

    assert 'shopcore_events_published_total{kind="order.created"} 1.0' in text
    assert 'shopcore_event_listener_failures_total{kind="order.created"} 1.0' in text
    assert 'shopcore_event_subscriptions{kind="order.created"} 2.0' in text
    assert "shopcore_event_subscriptions_total 2.0" in text
    assert "# TYPE shopcore_events_published_total counter" in text
    assert text.endswith("\n")


def test_prometheus_metrics_empty_stats():
    text = build_prometheus_metrics({}, prefix="shop")
    assert "shop_event_subscriptions_total 0.0" in text
    assert "shop_event_tasks_pending 0.0" in text
