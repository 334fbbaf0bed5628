from .auth_routes import auth_bp
from .customer_routes import customer_bp
from .campaign_routes import campaign_bp
from .webhook_routes import webhook_bp
from .dashboard_routes import dashboard_bp
from .ai_routes import ai_bp

all_blueprints = [auth_bp, customer_bp, campaign_bp, webhook_bp, dashboard_bp, ai_bp]
