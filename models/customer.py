from decimal import Decimal

from extensions import db
from utils import utcnow, isoformat


class Customer(db.Model):
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20))
    # Aggregates below are only ever moved by services.order_service.record_order
    total_spend = db.Column(db.Numeric(10, 2), default=Decimal('0'), nullable=False)
    visit_count = db.Column(db.Integer, default=0, nullable=False)
    last_order_date = db.Column(db.DateTime, nullable=True)
    segment = db.Column(db.String(50), default='regular', nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    orders = db.relationship('Order', back_populates='customer', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'phone': self.phone,
            'total_spend': float(self.total_spend or 0),
            'visit_count': self.visit_count,
            'last_order_date': isoformat(self.last_order_date),
            'segment': self.segment,
            'created_at': isoformat(self.created_at)
        }


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(20), default='completed', nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    customer = db.relationship('Customer', back_populates='orders')

    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'amount': float(self.amount),
            'status': self.status,
            'created_at': isoformat(self.created_at)
        }
