from .user import User
from .customer import Customer, Order
from .campaign import Campaign
from .communication_log import CommunicationLog

# Ensure all models are imported here so SQLAlchemy knows about them
