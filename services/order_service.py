from decimal import Decimal

from extensions import db
from models.customer import Order
from utils import utcnow


def record_order(customer, amount, status='completed', created_at=None, commit=True):
    """
    Creates an order and moves the customer's aggregates with it.

    This is the only place total_spend, visit_count and last_order_date
    change, so seeding and backfills must go through here as well.
    """
    amount = Decimal(str(amount))
    if not amount.is_finite() or amount <= 0:
        raise ValueError("amount must be a positive number")

    created_at = created_at or utcnow()
    order = Order(customer=customer, amount=amount, status=status, created_at=created_at)
    db.session.add(order)

    customer.total_spend = (customer.total_spend or Decimal('0')) + amount
    customer.visit_count = (customer.visit_count or 0) + 1
    if customer.last_order_date is None or created_at > customer.last_order_date:
        customer.last_order_date = created_at

    if commit:
        db.session.commit()
    return order
