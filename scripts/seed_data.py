#!/usr/bin/env python3
"""
Seed script: creates users via the API (no direct DB), so it works against
either store the server selected at startup.
Run: API must be running.
  python scripts/seed_data.py
  python scripts/seed_data.py --users 100 --reset
"""

import argparse
import random

import httpx

API_BASE = "http://localhost:8000/api/v1"

FIRST_NAMES = [
    "Ava", "Liam", "Noah", "Mia", "Zara", "Omar", "Lena", "Kai", "Ines", "Yuki",
    "Ravi", "Sofia", "Jonas", "Amara", "Mateo", "Freya", "Hugo", "Leila", "Arjun", "Nora",
]
LAST_NAMES = [
    "Silva", "Kowalski", "Nakamura", "Okafor", "Larsen", "Haddad", "Moreau", "Patel",
    "Schmidt", "Rossi", "Kim", "Novak", "Fernandes", "Ivanova", "Brennan",
]
PLACES = [
    "Berlin", "Lisbon", "Austin", "Nairobi", "Osaka", "Toronto", "Pune", "Dublin",
    "Sao Paulo", "Krakow", "Melbourne", "Lyon",
]
GENDERS = ["female", "male", "non-binary", "prefer not to say"]
HOBBIES = [
    "coding", "reading", "chess", "hiking", "painting", "music", "cooking",
    "photography", "gaming", "cycling", "gardening", "travel",
]
COUNTRY_CODES = ["+1", "+44", "+49", "+91", "+81", "+351", "+55"]


def random_user(n: int) -> dict:
    first, last = random.choice(FIRST_NAMES), random.choice(LAST_NAMES)
    return {
        "name": f"{first} {last}",
        "email": f"{first}.{last}.{n}@example.com".lower(),
        "countryCode": random.choice(COUNTRY_CODES),
        "phone": f"{random.randint(200, 999)}{n:07d}",
        "place": random.choice(PLACES),
        "gender": random.choice(GENDERS),
        "hobbies": random.sample(HOBBIES, k=random.randint(1, 4)),
    }


def main():
    ap = argparse.ArgumentParser(description="Seed users via API")
    ap.add_argument("--users", type=int, default=50, help="Number of users to create")
    ap.add_argument("--base-url", default=API_BASE, help="API base URL")
    ap.add_argument("--reset", action="store_true", help="Clear the in-memory store first")
    args = ap.parse_args()

    created = 0
    errors = []

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        if args.reset:
            r = client.post("/users/reset-db")
            print(f"Reset: {r.status_code} {r.json().get('message')}")

        print(f"Creating {args.users} users...")
        for i in range(args.users):
            payload = random_user(i + 1)
            try:
                r = client.post("/users", json=payload)
                if r.status_code == 201:
                    created += 1
                else:
                    errors.append(f"{payload['email']}: {r.status_code} {r.text[:80]}")
            except httpx.HTTPError as e:
                errors.append(f"{payload['email']}: {e}")
            if (i + 1) % 10 == 0:
                print(f"  ... {i + 1} users")

    print(f"\nDone. Users created: {created}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for e in errors[:15]:
            print("  ", e)
        if len(errors) > 15:
            print("  ... and", len(errors) - 15, "more")


if __name__ == "__main__":
    main()
