"""
Payment gateway helpers.

Orders are created and captured on the gateway side. After checkout the
gateway hands the client an order id, a payment id and a signature;
the booking is only marked paid once that signature checks out.
"""

import hashlib
import hmac
from typing import Optional

from app.core.config import settings


def payment_signature(order_id: str, payment_id: str, secret: Optional[str] = None) -> str:
    key = (secret if secret is not None else settings.payment_key_secret).encode()
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    expected = payment_signature(order_id, payment_id)
    return hmac.compare_digest(expected.encode(), (signature or "").encode())
