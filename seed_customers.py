from datetime import timedelta

from app import create_app
from extensions import db
from models.customer import Customer
from services.order_service import record_order
from utils import utcnow

# Orders are (amount, days_ago) and replay through record_order so the
# customer aggregates always equal the sum of their orders.
CUSTOMERS_DATA = [
    {
        "name": "Riya Sharma",
        "email": "riya@acme.com",
        "phone": "+91 98765 43210",
        "segment": "vip",
        "orders": [(6500, 200), (4200, 40), (2300, 5)],
    },
    {
        "name": "Aman Patel",
        "email": "aman@zeta.io",
        "phone": "+91 99887 66554",
        "segment": "regular",
        "orders": [(450, 120)],
    },
    {
        "name": "Sneha Rao",
        "email": "sneha@pixel.com",
        "phone": "+91 91234 56789",
        "segment": "regular",
        "orders": [(1200, 60), (800, 30), (950, 12), (700, 2)],
    },
    {
        "name": "Kabir Mehta",
        "email": "kabir@orbit.dev",
        "phone": "+91 90000 11111",
        "segment": "new",
        "orders": [],
    },
]


def seed_customers(app=None):
    """Seeds the database with sample customers and their order history."""
    app = app or create_app()

    with app.app_context():
        print("🌱 Seeding customers...")
        added_count = 0
        now = utcnow()
        for data in CUSTOMERS_DATA:
            if Customer.query.filter_by(email=data['email']).first():
                print(f"   - Skipping '{data['email']}', already exists.")
                continue

            customer = Customer(
                name=data['name'], email=data['email'], phone=data.get('phone'),
                segment=data.get('segment', 'regular')
            )
            db.session.add(customer)
            for amount, days_ago in data['orders']:
                record_order(customer, amount, created_at=now - timedelta(days=days_ago), commit=False)
            added_count += 1
            print(f"   + Adding '{data['email']}' with {len(data['orders'])} orders.")

        if added_count > 0:
            db.session.commit()
            print(f"✅ Successfully added {added_count} new customers.")
        else:
            print("✅ No new customers to add.")


if __name__ == "__main__":
    seed_customers()
