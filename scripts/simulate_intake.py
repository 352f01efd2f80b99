# scripts/simulate_intake.py
import requests
import random
import sys
import time
from datetime import datetime, timedelta, timezone

BASE_URL = "http://localhost:8000"

NARRATIVES = [
    "We agreed the release plan early and escalated the one risk we could not close before the deadline.",
    "The deadline forced me to skip the review step and we fixed the issues in the following sprint.",
    "Finance asked us to bypass the approval so the order could ship before quarter end.",
    "Short answer.",
]


def generate_answers(style: str) -> list[dict]:
    answers = []
    for i in range(1, 19):
        if style == "straight":
            value = 5
        else:
            value = random.randint(2, 5)
        answers.append({"question_id": f"Q{i}", "value": value})

    answers += [
        {"question_id": "Q19", "value": random.choice(["Weekly", "Monthly", "Quarterly", "Rarely"])},
        {"question_id": "Q20", "value": random.choice([True, False])},
        {"question_id": "Q21", "value": random.choice(NARRATIVES)},
        {"question_id": "Q22", "value": random.choice(NARRATIVES)},
        {"question_id": "Q23", "value": "A colleague flagged a data issue and we paused the launch to fix it."},
        {"question_id": "Q24", "value": random.randint(1, 5)},
    ]
    return answers


def run_simulation(n=20):
    print(f"Starting intake simulation ({n} respondents)...")

    for i in range(n):
        started = datetime.now(timezone.utc) - timedelta(seconds=random.randint(60, 900))
        payload = {
            "case_id": f"SIM_{i}_{random.randint(1000, 9999)}",
            "respondent": {"id": f"resp_{i}", "name": f"Respondent {i}"},
            "consent": True,
            "started_at": started.isoformat(),
            "submitted_at": datetime.now(timezone.utc).isoformat(),
            "answers": generate_answers(random.choice(["normal", "normal", "straight"])),
        }

        try:
            res = requests.post(f"{BASE_URL}/api/intake/submit", json=payload, timeout=10)
        except requests.RequestException as e:
            print(f"Connection Error: {e}")
            break

        if res.status_code == 201:
            data = res.json()
            print(f"[{i+1}/{n}] {data['case_id']} | {data['validation_status']} | "
                  f"{data['confidence_level']} | {data['recommendation']}")
        else:
            print(f"[{i+1}/{n}] Error: {res.status_code} {res.text}")

        time.sleep(0.05)

    print("\nSimulation complete.")


if __name__ == "__main__":
    try:
        requests.get(f"{BASE_URL}/", timeout=5)
    except requests.RequestException:
        print("Server not running!")
        sys.exit(1)

    run_simulation()
