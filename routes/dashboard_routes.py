from flask import Blueprint, jsonify
from routes.auth_routes import token_required
from services.reporting import get_dashboard_stats

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("/stats", methods=["GET"])
@token_required
def dashboard_stats(current_user):
    return jsonify(get_dashboard_stats(current_user.id)), 200
