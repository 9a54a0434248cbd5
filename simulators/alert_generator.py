import argparse
import json
import os
import random
import urllib.request

SAMPLES = [
    ("Obstacle Ahead", "Ultrasonic sensor reports an obstacle within 30cm.", "medium", "hardware"),
    ("Motor Overheat", "Left drive motor temperature above 70C.", "high", "hardware"),
    ("Signal Weak", "Telemetry link quality dropped below 40%.", "low", "network"),
    ("Tilt Limit Exceeded", "Chassis tilt above safe threshold. Movement halted.", "critical", "safety"),
]


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
    p.add_argument("--count", type=int, default=1)
    args = p.parse_args()

    for _ in range(args.count):
        title, message, priority, category = random.choice(SAMPLES)
        payload = {"title": title, "message": message, "priority": priority, "category": category}
        status, body = post_json(f"{args.base_url}/alerts", payload)
        print(status)
        print(body)


if __name__ == "__main__":
    main()
