"""
Wallet state container.

Holds the signed-in user and every collection the app shows, and writes the
whole thing through a SnapshotPort after each change. Records are frozen, so
an update swaps in a new record rather than mutating the old one.
"""
import copy
import json
from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from upi_sim.exceptions import RecordNotFoundError, SnapshotError
from upi_sim.logger import get_logger
from upi_sim.models import DEFAULT_SNAPSHOT_KEY, Snapshot, utcnow
from upi_sim.schemas.records import (
    VPA,
    BankAccount,
    Beneficiary,
    Contact,
    PaymentRequest,
    QRCode,
    Transaction,
    User,
)

logger = get_logger(__name__)

COLLECTIONS = {
    "accounts": BankAccount,
    "vpas": VPA,
    "contacts": Contact,
    "beneficiaries": Beneficiary,
    "transactions": Transaction,
    "payment_requests": PaymentRequest,
    "qr_codes": QRCode,
}

# Newest first in these; the rest keep insertion order.
PREPENDED = frozenset({"transactions", "payment_requests"})


class SnapshotPort(Protocol):
    def load(self) -> Optional[dict]:
        ...

    def save(self, snapshot: dict) -> None:
        ...


class InMemorySnapshotPort:
    def __init__(self, snapshot: Optional[dict] = None):
        self._snapshot = copy.deepcopy(snapshot)

    def load(self) -> Optional[dict]:
        return copy.deepcopy(self._snapshot)

    def save(self, snapshot: dict) -> None:
        self._snapshot = copy.deepcopy(snapshot)


class SqlSnapshotPort:
    """Keeps the snapshot as one JSON document in the snapshots table."""

    def __init__(self, db: Session, key: str = DEFAULT_SNAPSHOT_KEY):
        self.db = db
        self.key = key

    def load(self) -> Optional[dict]:
        row = self.db.query(Snapshot).filter(Snapshot.key == self.key).first()
        if row is None:
            return None
        try:
            return json.loads(row.payload)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot {self.key!r} is not valid JSON: {e}") from e

    def save(self, snapshot: dict) -> None:
        payload = json.dumps(snapshot)
        row = self.db.query(Snapshot).filter(Snapshot.key == self.key).first()
        if row is None:
            self.db.add(Snapshot(key=self.key, payload=payload, updated_at=utcnow()))
        else:
            row.payload = payload
            row.updated_at = utcnow()
        self.db.commit()


class WalletStore:
    def __init__(self, port: SnapshotPort):
        self._port = port
        self._user: Optional[User] = None
        self._collections: Dict[str, List[BaseModel]] = {name: [] for name in COLLECTIONS}
        self._restore(port.load())

    def _restore(self, snapshot: Optional[dict]):
        if not snapshot:
            return
        try:
            if snapshot.get("user"):
                self._user = User.model_validate(snapshot["user"])
            for name, model in COLLECTIONS.items():
                self._collections[name] = [model.model_validate(item) for item in snapshot.get(name) or []]
        except ValidationError as e:
            raise SnapshotError(f"Snapshot holds an invalid record: {e}") from e

    def _persist(self):
        self._port.save(self.snapshot())

    def _records(self, collection: str) -> List[BaseModel]:
        if collection not in self._collections:
            raise ValueError(f"Unknown collection: {collection}")
        return self._collections[collection]

    # User

    @property
    def user(self) -> Optional[User]:
        return self._user

    def set_user(self, user: Optional[User]):
        self._user = user
        self._persist()

    def update_user(self, **changes) -> User:
        if self._user is None:
            raise RecordNotFoundError("No user is signed in")
        self._user = User.model_validate({**self._user.model_dump(), **changes})
        self._persist()
        return self._user

    def set_theme(self, theme: str) -> User:
        return self.update_user(theme=theme)

    # Collections

    def list(self, collection: str) -> List[BaseModel]:
        return list(self._records(collection))

    def find(self, collection: str, record_id: str) -> Optional[BaseModel]:
        return next((r for r in self._records(collection) if r.id == record_id), None)

    def add(self, collection: str, record: BaseModel) -> BaseModel:
        records = self._records(collection)
        if collection in PREPENDED:
            records.insert(0, record)
        else:
            records.append(record)
        self._persist()
        logger.debug("record_added", collection=collection, record_id=record.id)
        return record

    def update(self, collection: str, record_id: str, **changes) -> BaseModel:
        """
        Replace a record with a copy carrying `changes`.

        Raises:
            RecordNotFoundError: if no record has this id
        """
        records = self._records(collection)
        for i, record in enumerate(records):
            if record.id == record_id:
                updated = type(record).model_validate({**record.model_dump(), **changes})
                records[i] = updated
                self._persist()
                return updated
        raise RecordNotFoundError(f"{collection} has no record {record_id!r}")

    # Whole-store operations

    @property
    def is_empty(self) -> bool:
        return self._user is None and not any(self._collections.values())

    def snapshot(self) -> dict:
        return {
            "user": self._user.model_dump(mode="json") if self._user else None,
            **{
                name: [r.model_dump(mode="json") for r in records]
                for name, records in self._collections.items()
            },
        }

    def reset(self):
        self._user = None
        self._collections = {name: [] for name in COLLECTIONS}
        self._persist()

    def initialize(self, demo_snapshot: dict):
        """Fill the user and any empty collection from demo_snapshot; populated ones are left alone."""
        seeded = []
        if self._user is None and demo_snapshot.get("user"):
            self._user = User.model_validate(demo_snapshot["user"])
            seeded.append("user")
        for name, model in COLLECTIONS.items():
            if not self._collections[name] and demo_snapshot.get(name):
                self._collections[name] = [model.model_validate(item) for item in demo_snapshot[name]]
                seeded.append(name)
        if seeded:
            self._persist()
            logger.info("store_seeded", collections=seeded)
