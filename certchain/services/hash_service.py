# services/hash_service.py
"""
Identifier and pseudo-hash generators for certificates.

None of these are cryptographic. The random generators draw from a plain
`random.Random`, and `generate_data_hash` is only deterministic for identical
serialized input; it makes no collision-resistance promise.
"""
import json
import random
import string
from datetime import datetime, timezone
from typing import Any, Optional

HEX_DIGITS = "0123456789abcdef"
BASE36_DIGITS = string.digits + string.ascii_lowercase

_default_rng = random.Random()


def _random_hex(length: int, rng: Optional[random.Random] = None) -> str:
    rng = rng or _default_rng
    return "".join(rng.choice(HEX_DIGITS) for _ in range(length))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(moment: datetime) -> str:
    """Formats a datetime as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_certificate_id(rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> str:
    """
    Returns a human-facing identifier of the form CERT-<year>-<XXXXXX>.

    The six-character suffix is random base36, uppercased. Nothing checks it
    against existing identifiers, so callers must tolerate duplicates.
    """
    rng = rng or _default_rng
    year = (now or utc_now()).year
    suffix = "".join(rng.choice(BASE36_DIGITS) for _ in range(6)).upper()
    return f"CERT-{year}-{suffix}"


def generate_blockchain_hash(rng: Optional[random.Random] = None) -> str:
    """Content-hash stand-in stored on each record: 0x + 64 random hex digits."""
    return "0x" + _random_hex(64, rng)


def generate_transaction_hash(rng: Optional[random.Random] = None) -> str:
    """Transaction-hash stand-in returned by the chain simulator: 0x + 64 random hex digits."""
    return "0x" + _random_hex(64, rng)


def generate_account_address(rng: Optional[random.Random] = None) -> str:
    return "0x" + _random_hex(40, rng)


def generate_record_id(now: Optional[datetime] = None) -> str:
    """Opaque record id: milliseconds since the epoch, as a string."""
    moment = now or utc_now()
    return str(int(moment.timestamp() * 1000))


def serialize_payload(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def generate_data_hash(payload: Any) -> str:
    """
    Folds the serialized payload into 64 hex digits.

    Position i takes the code point of character i (cycling when the text is
    shorter than 64), adds i and keeps the low four bits.
    """
    text = serialize_payload(payload)
    digits = [HEX_DIGITS[(ord(text[i % len(text)]) + i) % 16] for i in range(64)]
    return "0x" + "".join(digits)
