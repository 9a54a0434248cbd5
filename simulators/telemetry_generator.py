import argparse
import json
import os
import random
import urllib.request
from datetime import datetime, timezone


def post_json(url: str, payload: dict):
    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=data,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    with urllib.request.urlopen(req, timeout=10) as resp:
        body = resp.read().decode("utf-8")
        return resp.status, body


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--base-url", default=os.getenv("ROVER_CONSOLE_URL", "http://localhost:8000"))
    p.add_argument("--object", default="person")
    p.add_argument("--confidence", type=float, default=None)
    args = p.parse_args()

    confidence = args.confidence if args.confidence is not None else round(random.uniform(50, 99), 1)
    payload = {
        "object_detected": args.object,
        "confidence": confidence,
        "distance": round(random.uniform(0.5, 8.0), 2),
        "action_taken": "stop" if confidence > 90 else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    status, body = post_json(f"{args.base_url}/rover/telemetry", payload)
    print(status)
    print(body)


if __name__ == "__main__":
    main()
