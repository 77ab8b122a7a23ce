import random
from datetime import date

from app.scripts.seed_demo_data import demo_client_payload, seed_clients, wipe_clients
from app.utils.validation import validate_client_payload

TODAY = date(2024, 6, 15)


def test_demo_payloads_are_valid():
    random.seed(7)
    for _ in range(50):
        data = validate_client_payload(demo_client_payload(TODAY))
        assert data["renewal_date"] >= data["start_date"]


def test_seed_then_wipe(store):
    random.seed(7)
    seed_clients(store, n=5, today=TODAY)
    assert len(store.snapshot()) == 5

    wipe_clients(store.context.owner_id)
    assert store.snapshot() == []
