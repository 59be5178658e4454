import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List
from urllib.parse import quote

import requests

LEVELS = ["debug", "info", "warn", "error"]
ROUTES = ["/", "/api/logs", "/login", "/checkout", "/healthz"]
ACTIONS = ["page_view", "button_click", "payment_attempt", "job_run", "auth_check"]
STATUS_CODES = [200, 200, 200, 201, 400, 401, 404, 500]
REGIONS = ["us-east-1", "us-west-2", "eu-west-1"]


def build_sample_payload(count: int, rng: random.Random | None = None, now: datetime | None = None) -> List[Dict[str, Any]]:
    """Synthetic events spread over the last 7 days."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    lookback = int(timedelta(days=7).total_seconds())

    payload = []
    for idx in range(count):
        ts = now - timedelta(seconds=rng.randint(0, lookback))
        payload.append({
            "event_id": f"evt_{int(now.timestamp())}_{idx}_{rng.randint(1000, 9999)}",
            "timestamp": ts.isoformat().replace("+00:00", "Z"),
            "level": rng.choice(LEVELS),
            "action": rng.choice(ACTIONS),
            "route": rng.choice(ROUTES),
            "duration_ms": rng.randint(10, 1500),
            "status_code": rng.choice(STATUS_CODES),
            "message": f"Synthetic log event {idx + 1}",
            "user_id": f"user_{rng.randint(1, 100)}",
            "meta": {
                "region": rng.choice(REGIONS),
                "release": f"2026.{rng.randint(1, 12)}.{rng.randint(0, 30)}",
            },
        })
    return payload


def send_logs(
    base_url: str,
    api_key: str,
    source: str,
    payload: List[Any],
    timeout: int = 15
) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}/api/logs/{quote(source, safe='')}"
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    resp = requests.post(url, json=payload, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp.json()
