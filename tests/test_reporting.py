from extensions import db
from models.campaign import Campaign
from models.communication_log import CommunicationLog
from models.user import User
from services.reporting import get_campaign_stats, get_dashboard_stats


def _campaign_with_logs(user, statuses, make_customer, name="Stats"):
    campaign = Campaign(user_id=user.id, name=name, type="promotional", message="Hi",
                        rules=[], audience_size=len(statuses), status="completed")
    db.session.add(campaign)
    db.session.flush()
    for status in statuses:
        customer = make_customer()
        db.session.add(CommunicationLog(campaign_id=campaign.id, customer_id=customer.id,
                                        message="Hi", status=status))
    db.session.commit()
    return campaign


def _user(email="stats@example.com"):
    user = User(email=email, name="Stats")
    db.session.add(user)
    db.session.commit()
    return user


def test_campaign_stats_count_by_status(app, make_customer):
    campaign = _campaign_with_logs(_user(), ["sent", "delivered", "delivered", "failed", "pending"], make_customer)

    assert get_campaign_stats(campaign.id) == {"sent": 1, "delivered": 2, "failed": 1, "pending": 1}


def test_dashboard_delivery_rate_is_zero_without_messages(app):
    user = _user()
    assert get_dashboard_stats(user.id) == {
        "totalCampaigns": 0, "messagesSent": 0, "activeCustomers": 0, "deliveryRate": 0
    }


def test_dashboard_aggregates_only_own_campaigns(app, make_customer):
    user, other = _user(), _user("other@example.com")
    _campaign_with_logs(user, ["delivered", "delivered", "failed"], make_customer)
    _campaign_with_logs(user, [], make_customer, name="Empty")
    _campaign_with_logs(other, ["delivered"] * 5, make_customer)

    stats = get_dashboard_stats(user.id)

    assert stats["totalCampaigns"] == 2
    assert stats["messagesSent"] == 3
    assert stats["deliveryRate"] == 66.7


def test_active_customers_ordered_in_last_90_days(app, make_customer):
    user = _user()
    make_customer(orders=[(100, 10)])
    make_customer(orders=[(100, 89)])
    make_customer(orders=[(100, 120)])
    make_customer()

    assert get_dashboard_stats(user.id)["activeCustomers"] == 2


def test_dashboard_endpoint(client, auth, make_customer):
    make_customer(orders=[(100, 1)])

    response = client.get("/api/dashboard/stats", headers=auth)

    assert response.status_code == 200
    assert response.get_json() == {
        "totalCampaigns": 0, "messagesSent": 0, "activeCustomers": 1, "deliveryRate": 0
    }
