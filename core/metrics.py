"""
Helpers to register Prometheus metrics once per process.
"""
from typing import Iterable

from prometheus_client import Counter

_counter_cache: dict[tuple[str, tuple[str, ...]], Counter] = {}


def get_counter(name: str, doc: str, labelnames: Iterable[str] = ()) -> Counter:
    key = (name, tuple(labelnames))
    if key not in _counter_cache:
        _counter_cache[key] = Counter(name, doc, list(labelnames))
    return _counter_cache[key]


checkout_counter = get_counter(
    "shopstack_checkout_sessions_total",
    "Checkout sessions created, by payment mode.",
    ["mode"],
)
payment_confirmed_counter = get_counter(
    "shopstack_payments_confirmed_total",
    "Orders confirmed as paid, by source.",
    ["source"],
)
webhook_event_counter = get_counter(
    "shopstack_stripe_webhook_events_total",
    "Stripe webhook events received, by type and outcome.",
    ["event_type", "outcome"],
)
