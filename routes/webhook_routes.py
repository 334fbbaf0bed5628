from flask import Blueprint, request, jsonify
from services.campaign_service import apply_delivery_receipt, InvalidTransition, RECEIPT_STATUSES
from utils import parse_timestamp
import logging

logger = logging.getLogger(__name__)

webhook_bp = Blueprint('webhooks', __name__)


# Called by the delivery vendor, not by dashboard users
@webhook_bp.route('/api/delivery-receipt', methods=['POST'])
def delivery_receipt():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Validation Error", "message": "Invalid receipt"}), 400

    try:
        log_id = int(data.get('logId'))
    except (TypeError, ValueError):
        return jsonify({"error": "Validation Error", "message": "logId must be an integer"}), 400

    status = data.get('status')
    if status not in RECEIPT_STATUSES:
        return jsonify({"error": "Validation Error", "message": f"status must be one of {', '.join(RECEIPT_STATUSES)}"}), 400

    timestamp = None
    if data.get('timestamp'):
        try:
            timestamp = parse_timestamp(str(data['timestamp']))
        except ValueError:
            return jsonify({"error": "Validation Error", "message": "timestamp must be ISO 8601"}), 400

    try:
        log = apply_delivery_receipt(log_id, status, timestamp=timestamp, vendor_response=data.get('vendorResponse'))
    except InvalidTransition as e:
        logger.warning("Ignoring receipt for log %s: %s", log_id, e)
        return jsonify({"error": "Action not allowed", "message": str(e)}), 409

    if log is None:
        return jsonify({"message": "Communication log not found"}), 404

    return jsonify({"success": True}), 200
