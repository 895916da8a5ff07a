import hashlib
import hmac
import logging
import re
import requests
from django.conf import settings
from core.exceptions import GatewayError

logger = logging.getLogger(__name__)

class RazorpayGateway:
    """
    Thin client for the Razorpay Orders and Payments APIs.

    Amounts are in minor units (paise). Every failure, including network errors,
    surfaces as ``GatewayError`` carrying the provider's code and description.
    """

    def __init__(self, key_id=None, key_secret=None, webhook_secret=None, base_url=None, timeout=10):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.RAZORPAY_WEBHOOK_SECRET
        self.base_url = (base_url or settings.RAZORPAY_BASE_URL).rstrip('/')
        self.timeout = timeout

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method,
                url,
                auth=(self.key_id.strip(), self.key_secret.strip()),
                timeout=self.timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Razorpay request to {path} failed: {str(e)}")
            raise GatewayError(provider_code='NETWORK_ERROR', reason=str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            error = data.get('error') or {}
            logger.error(f"Razorpay HTTP {response.status_code} on {path}: {response.text}")
            raise GatewayError(
                provider_code=error.get('code') or f"HTTP_{response.status_code}",
                reason=error.get('description') or error.get('reason') or 'Payment provider error',
            )
        return data

    def create_order(self, amount, currency, receipt, notes):
        """Create an order for ``amount`` minor units; ``notes`` are echoed back on the payment."""
        payload = {
            'amount': amount,
            'currency': currency,
            'receipt': re.sub(r'[^a-zA-Z0-9\-_]', '', receipt)[:40],
            'notes': notes,
        }
        logger.info(f"Creating Razorpay order: {payload}")
        data = self._request('POST', '/orders', json=payload)
        if not data.get('id'):
            logger.error(f"Razorpay order response without id: {data}")
            raise GatewayError(provider_code='INVALID_RESPONSE', reason='Order id missing from provider response')
        return data

    def fetch_payment(self, payment_id):
        return self._request('GET', f"/payments/{payment_id}")

    def verify_checkout_signature(self, order_id, payment_id, signature):
        message = f"{order_id}|{payment_id}".encode('utf-8')
        computed = hmac.new(self.key_secret.encode('utf-8'), message, hashlib.sha256).hexdigest()
        return bool(signature) and hmac.compare_digest(computed, signature)

    def verify_webhook_signature(self, body, signature):
        if not signature or not self.webhook_secret:
            return False
        computed = hmac.new(self.webhook_secret.encode('utf-8'), body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(computed, signature)
