import time
import uuid


def generate_id(prefix: str) -> str:
    """
    Mint a record id: <prefix>-<ms timestamp>-<random hex>.

    The timestamp keeps ids roughly sortable; the uuid suffix keeps two ids
    minted in the same millisecond distinct.
    """
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
