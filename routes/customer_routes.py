from decimal import Decimal, InvalidOperation

from flask import Blueprint, request, jsonify
from routes.auth_routes import token_required
from models.customer import Customer, Order
from extensions import db
from services.order_service import record_order
import logging

logger = logging.getLogger(__name__)

customer_bp = Blueprint('customers', __name__, url_prefix="/api")


def _paging(default_limit=50):
    limit = request.args.get('limit', default_limit, type=int) or default_limit
    offset = request.args.get('offset', 0, type=int) or 0
    return max(1, min(limit, 500)), max(0, offset)


# --- Customers ---

@customer_bp.route('/customers', methods=['POST'])
@token_required
def create_customer(current_user):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Validation Error", "message": "Invalid customer data"}), 400

    email, name = data.get('email'), data.get('name')
    if not isinstance(email, str) or '@' not in email or not isinstance(name, str) or not name.strip():
        return jsonify({"error": "Validation Error", "message": "A valid email and name are required"}), 400

    if Customer.query.filter_by(email=email).first():
        return jsonify({
            "error": "Duplicate customer detected",
            "message": "A customer with this email already exists."
        }), 409

    segment = data.get('segment') or 'regular'
    if not isinstance(segment, str):
        return jsonify({"error": "Validation Error", "message": "segment must be text"}), 400

    phone = data.get('phone')
    if phone is not None and not isinstance(phone, str):
        return jsonify({"error": "Validation Error", "message": "phone must be text"}), 400

    customer = Customer(
        email=email,
        name=name.strip(),
        phone=phone,
        segment=segment,
        total_spend=Decimal('0'),
        visit_count=0
    )
    db.session.add(customer)
    db.session.commit()
    logger.info("Customer %s created (%s)", customer.id, customer.email)

    return jsonify(customer.to_dict()), 201


@customer_bp.route('/customers', methods=['GET'])
@token_required
def get_customers(current_user):
    limit, offset = _paging()
    customers = Customer.query.order_by(Customer.created_at.desc(), Customer.id.desc()) \
        .limit(limit).offset(offset).all()
    return jsonify([c.to_dict() for c in customers]), 200


# --- Orders ---

@customer_bp.route('/orders', methods=['POST'])
@token_required
def create_order(current_user):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Validation Error", "message": "Invalid order data"}), 400

    customer_id = data.get('customerId')
    if not isinstance(customer_id, int) or isinstance(customer_id, bool):
        return jsonify({"error": "Validation Error", "message": "customerId must be an integer"}), 400

    customer = db.session.get(Customer, customer_id)
    if not customer:
        return jsonify({"message": "Customer not found"}), 404

    status = data.get('status') or 'completed'
    try:
        order = record_order(customer, data.get('amount'), status=status)
    except (ValueError, TypeError, InvalidOperation):
        return jsonify({"error": "Validation Error", "message": "amount must be a positive number"}), 400

    return jsonify(order.to_dict()), 201


@customer_bp.route('/orders', methods=['GET'])
@token_required
def get_orders(current_user):
    limit, _ = _paging()
    query = Order.query
    customer_id = request.args.get('customerId', type=int)
    if customer_id:
        query = query.filter_by(customer_id=customer_id)

    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).all()
    return jsonify([o.to_dict() for o in orders]), 200
