"""
Seeds the configured database with the demo wallet.

Fills the stored snapshot with the demo user (Rahul Sharma, rahul.sharma@hdfc),
two linked accounts, VPAs, contacts, beneficiaries, four transactions, one
incoming payment request and a personal QR code. Collections that already
hold records are left alone.
"""
import sys
import os

# Allow running from project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from upi_sim.database import engine, SessionLocal
from upi_sim import models
from upi_sim.demo_data import build_demo_snapshot
from upi_sim.store import SqlSnapshotPort, WalletStore


def seed(db) -> WalletStore:
    store = WalletStore(SqlSnapshotPort(db))
    store.initialize(build_demo_snapshot())
    return store


def main():
    print("Creating database tables...")
    models.Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        store = seed(db)
        snapshot = store.snapshot()
        print(f"Signed-in user: {store.user.name if store.user else '-'}")
        print("\nCollection sizes:")
        for name, records in snapshot.items():
            if isinstance(records, list):
                print(f"  {name}: {len(records)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
