"""
Locust load test for the single-row insertion endpoint.

Each request sends a partial bonus_registry row; the API fills in the
remaining columns with generated values and inserts into the configured
table variant.

Usage:
    locust -f locust/insert_one.py --host=http://localhost:3000
    BENCH_TABLE=idx_part locust -f locust/insert_one.py --host=http://localhost:3000
"""

import os
import random
import time
from datetime import datetime, timezone
from typing import Any, Dict

from locust import constant, task
from locust.contrib.fasthttp import FastHttpUser

# =============================================================================
# Configuration
# =============================================================================

TABLE_VARIANT = os.environ.get("BENCH_TABLE", "")
WAIT_SECONDS = float(os.environ.get("BENCH_WAIT_SECONDS", "0"))


def build_partial_row(user_num: int) -> Dict[str, Any]:
    """Main ledger fields for one entry; the API generates the rest."""
    now = datetime.now(timezone.utc)
    day = now.strftime("%Y-%m-%d")
    row_id = f"locust-{user_num}-{time.time_ns()}-{random.randint(0, 9999)}"
    return {
        "id": row_id,
        "date": now.strftime("%Y-%m-%d %H:%M:%S"),
        "amount": random.randint(-500, 1499),
        "accounted_for_bs_profile_id": f"locust-profile-{user_num % 10}",
        "bs_profile_id": f"locust-bs-{user_num % 5}",
        "bonus_type_id": "premial" if user_num % 2 == 0 else "qualification",
        "cancelled": False,
        "doc_to_track_id": f"locust-doc-{row_id[:16]}",
        "doc_to_track_type_id": "bsBonusDocument",
        "registrar_type_id": "bsBonusDocument",
        "registrar_id": f"locust-reg-{user_num}",
        "row": 1,
        "action_source_id": "operator",
        "date_of_expire": day,
        "doc_to_track_date": day,
    }


# =============================================================================
# Locust User Class
# =============================================================================

class InsertOneUser(FastHttpUser):
    """Posts one partial row per task."""

    wait_time = constant(WAIT_SECONDS)
    user_num: int = 0

    def on_start(self):
        self.user_num = random.randint(1, 2**31 - 1)

    @task
    def insert_one(self):
        path = "/api/insert-one"
        if TABLE_VARIANT:
            path = f"{path}?table={TABLE_VARIANT}"
        with self.client.post(
            path,
            json=build_partial_row(self.user_num),
            catch_response=True,
            name="insert-one",
        ) as response:
            if response.status_code != 201:
                response.failure(f"Unexpected status: {response.status_code}")
                return
            try:
                body = response.json()
            except ValueError:
                response.failure("Response is not JSON")
                return
            if body.get("ok") is True:
                response.success()
            else:
                response.failure(f"ok flag missing: {body}")
