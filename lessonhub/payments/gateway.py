"""
Razorpay Payment Link gateway

Checkout sessions are Razorpay Payment Links: creating one returns a hosted
`short_url` to redirect the buyer to, fetching one reports whether it was
paid together with the notes we attached at creation.
"""

from dataclasses import dataclass, field
from typing import Optional

import razorpay

from lessonhub.config import Config
from lessonhub.errors import UpstreamError


@dataclass
class CheckoutSession:
    id: str
    status: str
    paid: bool
    transaction_id: Optional[str]
    amount: float  # major units
    currency: str
    metadata: dict = field(default_factory=dict)


class RazorpayGateway:
    def __init__(self, client: razorpay.Client):
        self.client = client

    @classmethod
    def from_config(cls, config: Config) -> Optional["RazorpayGateway"]:
        if not config.razorpay_configured:
            print("⚠️  Razorpay keys not set - checkout disabled")
            return None
        client = razorpay.Client(auth=(config.RAZORPAY_KEY_ID, config.RAZORPAY_KEY_SECRET))
        print("✅ Razorpay client ready")
        return cls(client)

    def create_checkout_session(
        self,
        amount: int,
        currency: str,
        email: str,
        callback_url: str,
        lesson_id: Optional[str] = None
    ) -> dict:
        """Create a payment link; amount is in major units"""
        data = {
            "amount": amount * 100,  # paise
            "currency": currency,
            "description": "LessonHub Premium - lifetime access",
            "customer": {"email": email},
            "notify": {"email": True},
            "reminder_enable": False,
            "notes": {"email": email, "lessonId": lesson_id or ""},
            "callback_url": callback_url,
            "callback_method": "get",
        }
        try:
            link = self.client.payment_link.create(data)
        except razorpay.errors.BadRequestError as e:
            raise UpstreamError(f"Payment provider rejected the request: {e}")
        except Exception as e:
            raise UpstreamError(f"Payment provider error: {e}")

        return {"id": link["id"], "url": link["short_url"]}

    def retrieve_session(self, session_id: str) -> CheckoutSession:
        try:
            link = self.client.payment_link.fetch(session_id)
        except razorpay.errors.BadRequestError as e:
            raise UpstreamError(f"Invalid payment session: {e}")
        except Exception as e:
            raise UpstreamError(f"Payment provider error: {e}")

        status = link.get("status", "")
        payments = link.get("payments") or []
        captured = next((p for p in payments if p.get("status") == "captured"), None)

        return CheckoutSession(
            id=link["id"],
            status=status,
            paid=status == "paid",
            transaction_id=captured.get("payment_id") if captured else None,
            amount=(link.get("amount_paid") or link.get("amount") or 0) / 100,
            currency=link.get("currency", ""),
            metadata=dict(link.get("notes") or {})
        )
