from __future__ import annotations

import csv
import io
from typing import Sequence

from .. import models, schemas
from .pricing import round_to_cents

CSV_COLUMNS = [
    "id",
    "createdAt",
    "status",
    "fulfillmentMethod",
    "customerName",
    "customerPhone",
    "itemCount",
    "subtotal",
    "tax",
    "total",
]


def orders_csv(orders: Sequence[models.Order]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for order in orders:
        writer.writerow(
            [
                order.id,
                order.created_at.isoformat(timespec="seconds") + "Z",
                order.status.value,
                order.fulfillment_method.value,
                order.customer_name,
                order.customer_phone,
                order.item_count,
                f"{order.subtotal:.2f}",
                f"{order.tax:.2f}",
                f"{order.total:.2f}",
            ]
        )
    return buffer.getvalue()


def summarize(orders: Sequence[models.Order]) -> schemas.ReportSummary:
    return schemas.ReportSummary(
        revenue=round_to_cents(sum(order.total for order in orders)),
        orders=len(orders),
        items=sum(order.item_count for order in orders),
    )
