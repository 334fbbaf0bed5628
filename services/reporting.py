from datetime import timedelta

from sqlalchemy import func

from extensions import db
from models.campaign import Campaign
from models.communication_log import CommunicationLog
from models.customer import Customer
from utils import utcnow

ACTIVE_CUSTOMER_DAYS = 90


def get_campaign_stats(campaign_id):
    rows = db.session.query(
        CommunicationLog.status,
        func.count(CommunicationLog.id)
    ).filter(
        CommunicationLog.campaign_id == campaign_id
    ).group_by(CommunicationLog.status).all()

    counts = dict(rows)
    return {
        "sent": counts.get('sent', 0),
        "delivered": counts.get('delivered', 0),
        "failed": counts.get('failed', 0),
        "pending": counts.get('pending', 0)
    }


def get_dashboard_stats(user_id, now=None):
    now = now or utcnow()

    total_campaigns = Campaign.query.filter_by(user_id=user_id).count()

    user_logs = db.session.query(func.count(CommunicationLog.id)) \
        .select_from(CommunicationLog) \
        .join(Campaign, CommunicationLog.campaign_id == Campaign.id) \
        .filter(Campaign.user_id == user_id)

    messages_sent = user_logs.scalar() or 0
    delivered = user_logs.filter(CommunicationLog.status == 'delivered').scalar() or 0

    active_customers = Customer.query.filter(
        Customer.last_order_date >= now - timedelta(days=ACTIVE_CUSTOMER_DAYS)
    ).count()

    delivery_rate = 0
    if messages_sent > 0:
        delivery_rate = round((delivered / messages_sent) * 100, 1)

    return {
        "totalCampaigns": total_campaigns,
        "messagesSent": messages_sent,
        "activeCustomers": active_customers,
        "deliveryRate": delivery_rate
    }
