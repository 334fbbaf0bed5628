"""
Simulated messaging vendor.

submit() only queues the work and hands back the correlation id. The queued
job decides the outcome later and reports it to the receipt webhook, the way
a real gateway would call back with a delivery report.
"""
import logging
import random
import string
import time
from datetime import datetime, timedelta, timezone

import requests

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Delivery failed - recipient unreachable"


class DeliverySimulator:
    def __init__(self, scheduler, receipt_url, success_rate=0.9, min_delay=1.0, max_delay=3.0,
                 rng=None, http=None):
        self.scheduler = scheduler
        self.receipt_url = receipt_url
        self.success_rate = success_rate
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.rng = rng or random.Random()
        self.http = http or requests

    @classmethod
    def from_config(cls, config, scheduler):
        return cls(
            scheduler,
            receipt_url=config['DELIVERY_RECEIPT_URL'],
            success_rate=config['DELIVERY_SUCCESS_RATE'],
            min_delay=config['DELIVERY_MIN_DELAY'],
            max_delay=config['DELIVERY_MAX_DELAY']
        )

    def submit(self, recipient, message, correlation_id):
        delay = self.rng.uniform(self.min_delay, self.max_delay)
        self.scheduler.add_job(
            func=self.deliver,
            trigger='date',
            run_date=datetime.now(timezone.utc) + timedelta(seconds=delay),
            args=[recipient, message, correlation_id],
            id=f"delivery-{correlation_id}",
            replace_existing=True
        )
        logger.debug("Queued message for %s (log %s) in %.1fs", recipient, correlation_id, delay)
        return correlation_id

    def deliver(self, recipient, message, correlation_id):
        """Decides the outcome of one message and reports it back."""
        if self.rng.random() < self.success_rate:
            response = {"success": True, "messageId": self._message_id()}
        else:
            response = {"success": False, "error": FAILURE_MESSAGE}

        status = "delivered" if response["success"] else "failed"
        self.post_receipt(correlation_id, status, response)
        logger.info("Message %s to %s", status, recipient)
        return response

    def post_receipt(self, correlation_id, status, response):
        payload = {
            "logId": correlation_id,
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "vendorResponse": response
        }
        try:
            receipt = self.http.post(self.receipt_url, json=payload, timeout=10)
            if not receipt.ok:
                logger.error("Delivery receipt for log %s rejected: HTTP %s", correlation_id, receipt.status_code)
        except requests.RequestException as e:
            logger.error("Error sending delivery receipt for log %s: %s", correlation_id, e)

    def _message_id(self):
        suffix = ''.join(self.rng.choices(string.ascii_lowercase + string.digits, k=9))
        return f"msg_{int(time.time() * 1000)}_{suffix}"
