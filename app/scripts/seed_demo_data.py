import argparse
import random
from datetime import timedelta

from faker import Faker

from app import create_app, db
from app.models import Client
from app.services.client_store import ClientStore, OperatorContext
from app.utils.dates import format_iso_date, today_local

fake = Faker()

SERVERS = ["Alpha", "Beta", "Gamma", "Nova", "Prime"]
PRICES = [25.00, 30.00, 35.00, 40.00, 50.00]


# ============================================================
#  WIPE
# ============================================================

def wipe_clients(owner_id=None):
    print("⚠️  Wiping clients...")
    q = db.session.query(Client)
    if owner_id:
        q = q.filter(Client.owner_id == owner_id)
    deleted = q.delete(synchronize_session=False)
    db.session.commit()
    print(f"✅ {deleted} clients wiped.")


# ============================================================
#  SEED HELPERS
# ============================================================

def _fake_mac():
    return ":".join(f"{random.randint(0, 255):02X}" for _ in range(6))


def demo_client_payload(today):
    """One plausible client: started up to a year ago, renewal anywhere from
    ~2 months overdue to ~1 month ahead so every status shows up."""
    start = today - timedelta(days=random.randint(0, 365))
    renewal = today + timedelta(days=random.randint(-60, 30))
    if renewal < start:
        renewal = start + timedelta(days=30)

    return {
        "name": fake.name(),
        "phone": fake.numerify("(###) 555-####"),
        "startDate": format_iso_date(start),
        "renewalDate": format_iso_date(renewal),
        "price": random.choice(PRICES),
        "devices": random.choice([1, 1, 1, 2, 3]),
        "server": random.choice(SERVERS),
        "macAddress": _fake_mac() if random.random() < 0.6 else None,
        "notes": fake.sentence() if random.random() < 0.3 else None,
    }


def seed_clients(store, n=40, today=None):
    today = today_local(today)
    rows = []
    for _ in range(n):
        rows.append(store.create(demo_client_payload(today), today=today))
    print(f"✅ Seeded {len(rows)} clients for owner={store.context.owner_id}.")
    return rows


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--wipe", action="store_true")
    parser.add_argument("--seed", action="store_true")
    parser.add_argument("--count", type=int, default=40)
    parser.add_argument("--owner", default=None)
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        owner = args.owner or app.config["DEFAULT_OPERATOR_ID"]
        if args.wipe:
            wipe_clients(owner)
        if args.seed:
            store = ClientStore(
                OperatorContext(owner_id=owner),
                default_price=app.config["DEFAULT_CLIENT_PRICE"],
            )
            seed_clients(store, n=args.count)


if __name__ == "__main__":
    main()
