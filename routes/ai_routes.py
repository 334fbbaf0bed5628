from flask import Blueprint, request, jsonify
from routes.auth_routes import token_required
from services import ai_service

ai_bp = Blueprint("ai", __name__, url_prefix="/api/ai")


@ai_bp.route("/convert-rules", methods=["POST"])
@token_required
def convert_rules(current_user):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        return jsonify({"message": "Description is required"}), 400

    return jsonify({"rules": ai_service.convert_rules(description)}), 200


@ai_bp.route("/generate-messages", methods=["POST"])
@token_required
def generate_messages(current_user):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    objective = data.get("objective")
    if not isinstance(objective, str) or not objective.strip():
        return jsonify({"message": "Objective is required"}), 400

    messages = ai_service.generate_messages(objective, data.get("audienceDescription"))
    return jsonify({"messages": messages}), 200
