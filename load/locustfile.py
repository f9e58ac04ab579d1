"""
Locust load script for the Razorpay webhook.

Simulates at-least-once delivery from the provider:
- Signed `payment.captured` events for a small set of seeded orders, sent
  repeatedly so most deliveries are duplicates racing the first one
- Events for unknown orders and non-captured event types (acknowledged no-ops)
- An occasional forged signature (must be rejected with 400)

Configure with env vars:
- HOST: pass via `--host http://localhost:8000`
- FRUTICO_WEBHOOK_SECRET: must match RAZORPAY_WEBHOOK_SECRET on the server
- FRUTICO_ORDER_IDS: CSV of provider order ids seeded as pending orders

Run:
  locust -f load/locustfile.py --host http://localhost:8000
Afterwards every seeded order should be paid exactly once and have received
one ticket email.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import os
import random
import time
import uuid
from typing import List

from locust import HttpUser, task, between


# --- Config -------------------------------------------------------------------

WEBHOOK_SECRET = os.getenv("FRUTICO_WEBHOOK_SECRET", "whsec_load_test")


def _load_order_ids() -> List[str]:
    raw = os.getenv("FRUTICO_ORDER_IDS", "").strip()
    ids = [piece.strip() for piece in raw.split(",") if piece.strip()]
    return ids or ["order_load_1", "order_load_2", "order_load_3"]


ORDER_IDS = _load_order_ids()


# --- Helpers ------------------------------------------------------------------

def _event(event: str, order_id: str, payment_id: str, amount: int = 25000) -> bytes:
    payload = {
        "entity": "event",
        "event": event,
        "contains": ["payment"],
        "payload": {
            "payment": {
                "entity": {
                    "id": payment_id,
                    "entity": "payment",
                    "amount": amount,
                    "currency": "INR",
                    "order_id": order_id,
                }
            }
        },
        "created_at": int(time.time()),
    }
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _sign(body: bytes) -> str:
    return hmac.new(WEBHOOK_SECRET.encode("utf-8"), body, hashlib.sha256).hexdigest()


# --- The User Model -----------------------------------------------------------

class RazorpayDelivery(HttpUser):
    wait_time = between(0.05, 0.5)

    def _post(self, body: bytes, signature: str, name: str, expect: int) -> None:
        with self.client.post(
            "/webhook/razorpay",
            data=body,
            headers={"Content-Type": "application/json", "X-Razorpay-Signature": signature},
            name=name,
            catch_response=True,
        ) as resp:
            if resp.status_code != expect:
                resp.failure(f"expected {expect}, got {resp.status_code}")
            else:
                resp.success()

    @task(10)
    def captured_duplicate(self):
        order_id = random.choice(ORDER_IDS)
        # Stable payment id per order: the provider redelivers the same event
        body = _event("payment.captured", order_id, f"pay_{order_id}")
        self._post(body, _sign(body), "captured", 200)

    @task(2)
    def captured_unknown_order(self):
        body = _event("payment.captured", f"order_{uuid.uuid4().hex[:12]}", f"pay_{uuid.uuid4().hex[:12]}")
        self._post(body, _sign(body), "captured (unknown order)", 200)

    @task(2)
    def other_event(self):
        body = _event("payment.authorized", random.choice(ORDER_IDS), f"pay_{uuid.uuid4().hex[:12]}")
        self._post(body, _sign(body), "authorized (ignored)", 200)

    @task(1)
    def forged_signature(self):
        body = _event("payment.captured", random.choice(ORDER_IDS), "pay_forged")
        self._post(body, "0" * 64, "forged signature", 400)
