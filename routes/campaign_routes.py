from flask import Blueprint, request, jsonify, current_app
from models.campaign import Campaign, CAMPAIGN_TYPES
from models.communication_log import CommunicationLog
from routes.auth_routes import token_required
from services.audience_service import AudienceService
from services.campaign_service import create_campaign, launch_campaign, InvalidTransition
from services.reporting import get_campaign_stats
from services import ai_service

campaign_bp = Blueprint('campaigns', __name__, url_prefix="/api/campaigns")

PREVIEW_LIMIT = 10


def _vendor():
    return current_app.extensions['delivery_vendor']


def _own_campaign(current_user, campaign_id):
    return Campaign.query.filter_by(id=campaign_id, user_id=current_user.id).first()


@campaign_bp.route('/preview-audience', methods=['POST'])
@token_required
def preview_audience(current_user):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Validation Error", "message": "rules are required"}), 400

    try:
        audience = AudienceService.resolve_audience(data.get('rules'))
    except ValueError as e:
        return jsonify({"error": "Validation Error", "message": str(e)}), 400

    return jsonify({
        "size": audience["size"],
        "breakdown": audience["breakdown"],
        "customers": [c.to_dict() for c in audience["matches"][:PREVIEW_LIMIT]]
    }), 200


@campaign_bp.route('', methods=['GET'])
@token_required
def get_campaigns(current_user):
    limit = request.args.get('limit', 50, type=int) or 50
    campaigns = Campaign.query.filter_by(user_id=current_user.id) \
        .order_by(Campaign.created_at.desc(), Campaign.id.desc()).limit(limit).all()

    result = [{**c.to_dict(), **get_campaign_stats(c.id)} for c in campaigns]
    return jsonify(result), 200


@campaign_bp.route('', methods=['POST'])
@token_required
def create(current_user):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Validation Error", "message": "Invalid campaign data"}), 400

    name, campaign_type, message = data.get('name'), data.get('type'), data.get('message')
    status = data.get('status') or 'draft'

    if not isinstance(name, str) or not name.strip() or not isinstance(message, str) or not message.strip():
        return jsonify({"error": "Validation Error", "message": "name and message are required"}), 400
    if campaign_type not in CAMPAIGN_TYPES:
        return jsonify({"error": "Validation Error", "message": f"type must be one of {', '.join(CAMPAIGN_TYPES)}"}), 400
    if status not in ('draft', 'running'):
        return jsonify({"error": "Validation Error", "message": "status must be 'draft' or 'running'"}), 400

    try:
        campaign = create_campaign(
            current_user, name.strip(), campaign_type, message, data.get('rules'),
            status=status, vendor=_vendor()
        )
    except ValueError as e:
        return jsonify({"error": "Validation Error", "message": str(e)}), 400

    return jsonify(campaign.to_dict()), 201


@campaign_bp.route('/<int:campaign_id>/launch', methods=['PATCH'])
@token_required
def launch(current_user, campaign_id):
    campaign = _own_campaign(current_user, campaign_id)
    if not campaign:
        return jsonify({"message": "Campaign not found"}), 404

    try:
        launch_campaign(campaign, _vendor())
    except InvalidTransition as e:
        return jsonify({"error": "Action not allowed", "message": str(e)}), 409

    return jsonify(campaign.to_dict()), 200


@campaign_bp.route('/<int:campaign_id>/logs', methods=['GET'])
@token_required
def get_logs(current_user, campaign_id):
    if not _own_campaign(current_user, campaign_id):
        return jsonify({"message": "Campaign not found"}), 404

    logs = CommunicationLog.query.filter_by(campaign_id=campaign_id) \
        .order_by(CommunicationLog.created_at.desc(), CommunicationLog.id.desc()).all()
    return jsonify([log.to_dict() for log in logs]), 200


@campaign_bp.route('/<int:campaign_id>/insights', methods=['GET'])
@token_required
def get_insights(current_user, campaign_id):
    campaign = _own_campaign(current_user, campaign_id)
    if not campaign:
        return jsonify({"message": "Campaign not found"}), 404

    stats = get_campaign_stats(campaign.id)
    return jsonify({**stats, "insights": ai_service.campaign_insights(campaign, stats)}), 200
