from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from upi_sim.database import Base

DEFAULT_SNAPSHOT_KEY = "upi-clone-storage"


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Snapshot(Base):
    __tablename__ = "snapshots"

    key = Column(String, primary_key=True, default=DEFAULT_SNAPSHOT_KEY)
    payload = Column(Text, nullable=False)  # JSON document, no schema version
    updated_at = Column(DateTime, nullable=False, default=utcnow)
