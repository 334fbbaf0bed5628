from extensions import db
from utils import utcnow, isoformat

LOG_STATUSES = ('pending', 'sent', 'delivered', 'failed')
TERMINAL_LOG_STATUSES = ('delivered', 'failed')


class CommunicationLog(db.Model):
    __tablename__ = 'communication_logs'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    message = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')  # pending / sent / delivered / failed
    vendor_response = db.Column(db.JSON, nullable=True)
    sent_at = db.Column(db.DateTime, nullable=True)
    delivered_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    campaign = db.relationship('Campaign', back_populates='logs')
    customer = db.relationship('Customer')

    @property
    def is_terminal(self):
        return self.status in TERMINAL_LOG_STATUSES

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'customer_id': self.customer_id,
            'message': self.message,
            'status': self.status,
            'vendor_response': self.vendor_response,
            'sent_at': isoformat(self.sent_at),
            'delivered_at': isoformat(self.delivered_at),
            'created_at': isoformat(self.created_at)
        }
