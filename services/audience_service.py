from datetime import timedelta
from decimal import Decimal

from models.customer import Customer
from services.segment_rules import compile_rules
from utils import utcnow

HIGH_SPEND_THRESHOLD = Decimal('10000')
LOW_FREQUENCY_VISITS = 3
INACTIVE_DAYS = 90


class AudienceService:
    @staticmethod
    def resolve_audience(rules, now=None):
        """
        Resolves customers matching a segment rule list.
        Returns {"matches": [Customer], "size": int, "breakdown": {...}}.
        """
        now = now or utcnow()
        segment = compile_rules(rules, now=now)

        if segment.is_empty:
            matches = []
        else:
            matches = Customer.query.filter(segment.clause()).order_by(Customer.id).all()

        return {
            "matches": matches,
            "size": len(matches),
            "breakdown": AudienceService.breakdown(matches, now=now)
        }

    @staticmethod
    def breakdown(customers, now=None):
        """Descriptive counts over an already-matched set; not filters."""
        now = now or utcnow()
        inactive_cutoff = now - timedelta(days=INACTIVE_DAYS)

        return {
            "highSpenders": sum(1 for c in customers if (c.total_spend or 0) > HIGH_SPEND_THRESHOLD),
            "lowFrequency": sum(1 for c in customers if (c.visit_count or 0) <= LOW_FREQUENCY_VISITS),
            "inactive": sum(
                1 for c in customers
                if c.last_order_date is None or c.last_order_date < inactive_cutoff
            )
        }
