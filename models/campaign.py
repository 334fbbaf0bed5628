from extensions import db
from utils import utcnow, isoformat

CAMPAIGN_TYPES = ('promotional', 'win-back', 'retention', 'welcome')


class Campaign(db.Model):
    __tablename__ = "campaigns"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # promotional | win-back | retention | welcome
    message = db.Column(db.Text, nullable=False)
    rules = db.Column(db.JSON, nullable=False, default=list)
    audience_size = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='draft')  # draft | running | completed | failed
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    launched_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship('User', back_populates='campaigns')
    logs = db.relationship('CommunicationLog', back_populates='campaign', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'type': self.type,
            'message': self.message,
            'rules': self.rules or [],
            'audience_size': self.audience_size,
            'status': self.status,
            'created_at': isoformat(self.created_at),
            'launched_at': isoformat(self.launched_at)
        }
