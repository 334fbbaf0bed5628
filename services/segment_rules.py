"""
Segment rule compilation.

A segment is an ordered list of rules such as::

    [{"field": "totalSpend", "operator": ">", "value": "10000", "connector": "AND"},
     {"field": "lastOrderDate", "operator": ">", "value": "90"}]

Each (field, operator) pair the table below knows about compiles into a
Condition. Conditions are grouped by their connectors (AND binds tighter than
OR) and the resulting CompiledSegment can be used both as an in-memory
predicate and as a SQLAlchemy filter clause.
"""
import logging
import operator
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum

from sqlalchemy import and_, or_, false

from models.customer import Customer
from utils import utcnow

logger = logging.getLogger(__name__)


class Field(Enum):
    TOTAL_SPEND = 'totalSpend'
    VISIT_COUNT = 'visitCount'
    LAST_ORDER_DATE = 'lastOrderDate'
    SEGMENT = 'segment'


class Operator(Enum):
    GT = '>'
    GTE = '>='
    LT = '<'
    LTE = '<='
    EQ = '='
    NE = '!='


class Connector(Enum):
    AND = 'AND'
    OR = 'OR'


COMPARATORS = {
    Operator.GT: operator.gt,
    Operator.GTE: operator.ge,
    Operator.LT: operator.lt,
    Operator.LTE: operator.le,
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
}

# "More days ago" means an earlier timestamp, so the date comparison flips.
DAYS_AGO_COMPARATORS = {
    Operator.GT: operator.lt,
    Operator.GTE: operator.le,
    Operator.LT: operator.gt,
    Operator.LTE: operator.ge,
}


class Condition:
    """A single compiled comparison against one Customer attribute."""

    def __init__(self, attribute, compare, value, match_missing=False):
        self.attribute = attribute
        self.compare = compare
        self.value = value
        self.match_missing = match_missing

    def matches(self, customer):
        actual = getattr(customer, self.attribute)
        if actual is None:
            return self.match_missing
        return bool(self.compare(actual, self.value))

    def clause(self):
        column = getattr(Customer, self.attribute)
        expression = self.compare(column, self.value)
        if self.match_missing:
            return or_(column.is_(None), expression)
        return expression

    def __repr__(self):
        return f"<Condition {self.attribute} {self.compare.__name__} {self.value!r}>"


class CompiledSegment:
    """Disjunction of conjunctions of Conditions."""

    def __init__(self, groups):
        self.groups = [group for group in groups if group]

    @property
    def is_empty(self):
        return not self.groups

    def matches(self, customer):
        return any(all(condition.matches(customer) for condition in group) for group in self.groups)

    def clause(self):
        if self.is_empty:
            return false()
        return or_(*[and_(*[condition.clause() for condition in group]) for group in self.groups])


# Values past a signed 64-bit integer cannot be bound as SQL parameters.
MAX_RULE_NUMBER = Decimal(2 ** 63 - 1)


def _parse_decimal(raw):
    value = Decimal(raw)
    if not value.is_finite():
        raise ValueError(f"not a finite number: {raw}")
    if abs(value) > MAX_RULE_NUMBER:
        raise ValueError(f"number out of range: {raw}")
    return value


def _total_spend(op, raw, now):
    return Condition('total_spend', COMPARATORS[op], _parse_decimal(raw))


def _visit_count(op, raw, now):
    # Fractional input truncates toward zero: "3.7" means 3,
    # so "< 3.7" excludes 3 visits and ">= 3.7" includes them.
    return Condition('visit_count', COMPARATORS[op], int(_parse_decimal(raw)))


def _segment(op, raw, now):
    return Condition('segment', COMPARATORS[op], raw)


def _last_order_date(op, raw, now):
    cutoff = now - timedelta(days=float(_parse_decimal(raw)))
    # A customer who never ordered is treated as inactive forever.
    return Condition('last_order_date', DAYS_AGO_COMPARATORS[op], cutoff,
                     match_missing=op in (Operator.GT, Operator.GTE))


RULE_TABLE = {}
for _op in Operator:
    RULE_TABLE[(Field.TOTAL_SPEND, _op)] = _total_spend
    RULE_TABLE[(Field.VISIT_COUNT, _op)] = _visit_count
for _op in (Operator.EQ, Operator.NE):
    RULE_TABLE[(Field.SEGMENT, _op)] = _segment
for _op in DAYS_AGO_COMPARATORS:
    RULE_TABLE[(Field.LAST_ORDER_DATE, _op)] = _last_order_date


def build_condition(rule, now=None):
    """Compile one rule, or return None when the rule is not usable."""
    now = now or utcnow()
    try:
        field = Field(rule.get('field'))
        op = Operator(rule.get('operator'))
    except ValueError:
        logger.debug("Dropping rule with unknown field/operator: %s", rule)
        return None

    builder = RULE_TABLE.get((field, op))
    raw = rule.get('value')
    if builder is None or raw is None or isinstance(raw, (dict, list, bool)):
        logger.debug("Dropping unsupported rule: %s", rule)
        return None

    try:
        return builder(op, str(raw).strip(), now)
    except (ValueError, InvalidOperation, OverflowError):
        logger.debug("Dropping rule with unparsable value: %s", rule)
        return None


def _connector(rule):
    try:
        return Connector(str(rule.get('connector') or 'AND').upper())
    except ValueError:
        return Connector.AND


def compile_rules(rules, now=None):
    """
    Compile an ordered rule list into a CompiledSegment.

    Raises ValueError when the input is not a list of objects. Rules that
    reference an unknown field/operator combination or carry an unparsable
    value are dropped; the connector of the last kept rule then joins it to
    the next kept rule.
    """
    if rules is None:
        rules = []
    if not isinstance(rules, list):
        raise ValueError("rules must be a list")

    now = now or utcnow()
    groups = [[]]
    pending = None
    for index, rule in enumerate(rules):
        if not isinstance(rule, dict):
            raise ValueError(f"rule {index} must be an object")
        condition = build_condition(rule, now)
        if condition is None:
            continue
        if pending is Connector.OR:
            groups.append([])
        groups[-1].append(condition)
        pending = _connector(rule)

    return CompiledSegment(groups)


def validate_rules(rules):
    """Check the structure of a rule list and return it unchanged."""
    compile_rules(rules)
    return rules or []
