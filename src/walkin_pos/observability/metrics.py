"""Custom metrics for the walk-in ordering engine."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("walkin-pos")

catalog_sync_counter = meter.create_counter(
    name="catalog_sync_total",
    description="Catalog syncs by kind (categories, items) and outcome",
    unit="1",
)

receipts_printed_counter = meter.create_counter(
    name="receipts_printed_total",
    description="Receipts printed by payment mode",
    unit="1",
)

print_failure_counter = meter.create_counter(
    name="print_failure_total",
    description="Receipts that failed to print",
    unit="1",
)

order_submission_counter = meter.create_counter(
    name="order_submission_total",
    description="Order submissions by outcome",
    unit="1",
)

order_total_histogram = meter.create_histogram(
    name="order_total_amount",
    description="Billed total of printed orders",
    unit="INR",
)


def record_catalog_sync(kind: str, success: bool) -> None:
    """Record a catalog sync attempt.

    Args:
        kind: "categories" or "items"
        success: Whether the catalog was replaced
    """
    catalog_sync_counter.add(1, {"kind": kind, "outcome": "success" if success else "failure"})


def record_receipt_printed(payment_mode: str, total: Decimal) -> None:
    """Record a printed receipt and its billed total.

    Args:
        payment_mode: "Cash" or "UPI"
        total: Billed amount
    """
    receipts_printed_counter.add(1, {"payment_mode": payment_mode})
    order_total_histogram.record(float(total), {"payment_mode": payment_mode})


def record_print_failure(printer: str) -> None:
    """Record a failed print on the named printer adapter."""
    print_failure_counter.add(1, {"printer": printer})


def record_order_submission(success: bool) -> None:
    """Record the outcome of an order submission."""
    order_submission_counter.add(1, {"outcome": "success" if success else "failure"})
