from extensions import db
from utils import utcnow, isoformat


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    avatar = db.Column(db.String(500))
    google_id = db.Column(db.String(100), unique=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    campaigns = db.relationship('Campaign', back_populates='user', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'avatar': self.avatar,
            'created_at': isoformat(self.created_at)
        }
