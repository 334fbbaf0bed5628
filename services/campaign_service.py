import logging

from extensions import db
from models.campaign import Campaign
from models.communication_log import CommunicationLog, LOG_STATUSES
from services.audience_service import AudienceService
from services.segment_rules import validate_rules
from utils import utcnow

logger = logging.getLogger(__name__)

VALID_CAMPAIGN_TRANSITIONS = {
    "draft": ["running"],
    "running": ["completed", "failed"],
    "completed": [],  # TERMINAL
    "failed": ["running"],  # Manual relaunch
}

RECEIPT_STATUSES = [s for s in LOG_STATUSES if s != 'pending']


class InvalidTransition(Exception):
    """Raised when a campaign or log is asked to move to a state it cannot reach."""
    pass


def transition(campaign, new_status):
    allowed = VALID_CAMPAIGN_TRANSITIONS.get(campaign.status, [])
    if new_status not in allowed:
        raise InvalidTransition(f"Campaign {campaign.id} cannot go from '{campaign.status}' to '{new_status}'")
    campaign.status = new_status


def render_message(template, customer):
    if not template:
        return ""
    return template.replace("{{name}}", customer.name)


def create_campaign(user, name, campaign_type, message, rules, status='draft', vendor=None):
    """
    Stores a new draft campaign with an audience size snapshot.
    Any status other than 'draft' launches it right away.
    """
    rules = validate_rules(rules)
    audience = AudienceService.resolve_audience(rules)

    campaign = Campaign(
        user_id=user.id, name=name, type=campaign_type, message=message,
        rules=rules, audience_size=audience["size"], status='draft'
    )
    db.session.add(campaign)
    db.session.commit()
    logger.info("Campaign %s created for user %s (audience %s)", campaign.id, user.id, campaign.audience_size)

    if status != 'draft':
        launch_campaign(campaign, vendor)
    return campaign


def launch_campaign(campaign, vendor, now=None):
    """
    Runs a campaign: resolve the audience, write one pending log per
    customer, hand every message to the delivery vendor, then mark the
    campaign completed. Delivery outcomes arrive later as receipts.
    """
    transition(campaign, 'running')
    campaign.launched_at = utcnow()
    db.session.commit()
    logger.info("Starting campaign %s", campaign.id)

    try:
        audience = AudienceService.resolve_audience(campaign.rules, now=now)
        campaign.audience_size = audience["size"]

        outbox = []
        for customer in audience["matches"]:
            log = CommunicationLog(
                campaign_id=campaign.id,
                customer_id=customer.id,
                message=render_message(campaign.message, customer),
                status='pending'
            )
            db.session.add(log)
            outbox.append((customer, log))
        db.session.commit()
    except Exception:
        logger.exception("Campaign %s failed before sending", campaign.id)
        db.session.rollback()
        transition(campaign, 'failed')
        db.session.commit()
        return campaign

    logger.info("Campaign %s: issuing %s messages", campaign.id, len(outbox))
    for customer, log in outbox:
        _issue(vendor, customer, log)

    transition(campaign, 'completed')
    db.session.commit()
    logger.info("Campaign %s completed", campaign.id)
    return campaign


def _issue(vendor, customer, log):
    try:
        vendor.submit(customer.email, log.message, log.id)
        log.sent_at = utcnow()
    except Exception as e:
        # One recipient failing never stops the rest of the batch.
        logger.warning("Send to %s failed for log %s: %s", customer.email, log.id, e)
        log.status = 'failed'
        log.vendor_response = {"success": False, "error": str(e)}


def apply_delivery_receipt(log_id, status, timestamp=None, vendor_response=None):
    """
    Reconciles a vendor receipt onto one log row.
    Returns None when the log does not exist. Campaign status is left alone.
    """
    if status not in RECEIPT_STATUSES:
        raise ValueError(f"status must be one of {', '.join(RECEIPT_STATUSES)}")

    log = db.session.get(CommunicationLog, log_id)
    if log is None:
        return None

    if log.is_terminal:
        raise InvalidTransition(f"Log {log.id} is already '{log.status}'")

    received_at = timestamp or utcnow()
    log.status = status
    if vendor_response is not None:
        log.vendor_response = vendor_response
    if status == 'delivered':
        log.delivered_at = received_at
    if log.sent_at is None and status in ('sent', 'delivered'):
        log.sent_at = received_at

    db.session.commit()
    logger.info("Log %s marked %s", log.id, status)
    return log
