import re

import pytest

from marketplace.ordering.domain.models.order import derive_overall_status, generate_order_number


@pytest.mark.unit
@pytest.mark.parametrize(
    "statuses, expected",
    [
        ([], "pending"),
        (["pending", "pending"], "pending"),
        (["delivered", "delivered"], "delivered"),
        (["cancelled", "cancelled"], "cancelled"),
        (["shipped", "shipped"], "partially_shipped"),
        (["shipped", "pending"], "partially_shipped"),
        (["shipped", "cancelled"], "partially_shipped"),
        (["shipped", "delivered"], "partially_shipped"),
        (["delivered", "pending"], "pending"),
        (["delivered", "cancelled"], "pending"),
        (["processing", "delivered"], "processing"),
        (["processing", "cancelled"], "processing"),
        (["confirmed"], "pending"),
        (["confirmed", "pending"], "pending"),
    ],
)
def test_derive_overall_status(statuses, expected):
    assert derive_overall_status(statuses) == expected


@pytest.mark.unit
def test_generate_order_number_format():
    order_number = generate_order_number()
    assert re.fullmatch(r"ORD-\d{13}-[A-Z0-9]{5}", order_number)
    assert order_number != generate_order_number()
