# services/local_store.py
"""
Client-local certificate store used when the REST API is unavailable.

A key-value backend holds one entry, keyed by a fixed name, whose value is
the JSON text of the whole certificate list. Every write rewrites that list
in full, so two stores sharing a backend race last-write-wins.
"""
import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional

from certchain.records import CertificateRecord

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "certchain_certificates"

SAMPLE_CERTIFICATES = [
    {
        "_id": "1",
        "certificateId": "CERT-2024-SAMPLE1",
        "recipientName": "John Doe",
        "recipientEmail": "john.doe@example.com",
        "courseName": "Full Stack Web Development",
        "issuerName": "Tech Academy",
        "completionDate": "2024-01-15",
        "description": "Completed comprehensive full stack development course covering React, Node.js, MongoDB, and Express.js",
        "issuedAt": "2024-01-16T10:00:00.000Z",
        "blockchainHash": "0x5f3c8e2a9b7d41c6e0f1a2b3c4d5e6f708192a3b4c5d6e7f8091a2b3c4d5e6f7",
        "isValid": True,
    },
    {
        "_id": "2",
        "certificateId": "CERT-2024-SAMPLE2",
        "recipientName": "Jane Smith",
        "recipientEmail": "jane.smith@example.com",
        "courseName": "Blockchain Development Fundamentals",
        "issuerName": "Crypto Institute",
        "completionDate": "2024-02-28",
        "description": "Mastered blockchain development using Ethereum, Solidity, and smart contract deployment",
        "issuedAt": "2024-03-01T14:30:00.000Z",
        "blockchainHash": "0x9a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f9",
        "isValid": True,
    },
]


class MemoryStorage:
    """In-process key-value storage with the same interface as JsonFileStorage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Key-value storage persisted as a single JSON object on disk.

    Values are stored as strings, like browser local storage. A missing or
    unreadable file behaves as an empty storage area.
    """

    def __init__(self, path: str):
        self.path = path

    def _read_all(self, for_write: bool = False) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Local storage file '{self.path}' is unreadable, treating it as empty: {e}")
            if for_write and isinstance(e, ValueError):
                os.replace(self.path, self.path + ".unreadable")
                logger.warning(f"Kept the unreadable file as '{self.path}.unreadable'")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, items: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        # Each writer gets its own temp file; os.replace makes the swap atomic.
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory or None, prefix=".local_storage-", suffix=".tmp", delete=False
        ) as f:
            json.dump(items, f, ensure_ascii=False, indent=2)
            tmp_path = f.name
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all(for_write=True)
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all(for_write=True)
        if items.pop(key, None) is not None:
            self._write_all(items)


class LocalCertificateStore:
    def __init__(self, storage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key

    @property
    def backup_key(self) -> str:
        return f"{self.key}.unparseable"

    def _load_items(self) -> Optional[List[Any]]:
        """Returns the stored JSON list, [] when nothing is stored, or None when the text is unusable."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Local certificate data under '{self.key}' is not valid JSON: {e}")
            return None
        if not isinstance(items, list):
            logger.warning(f"Local certificate data under '{self.key}' is a {type(items).__name__}, not a list")
            return None
        return items

    def load(self) -> List[CertificateRecord]:
        """Returns the stored records. Unusable text loads as empty; malformed entries are skipped."""
        records = []
        for index, item in enumerate(self._load_items() or []):
            try:
                records.append(CertificateRecord.from_dict(item))
            except (TypeError, KeyError, AttributeError) as e:
                logger.warning(f"Skipping malformed local certificate entry {index} under '{self.key}': {e!r}")
        return records

    def save(self, records: List[CertificateRecord]) -> None:
        payload = [record.to_dict() for record in records]
        self.storage.set_item(self.key, json.dumps(payload, ensure_ascii=False))

    def append(self, record: CertificateRecord) -> None:
        """
        Adds one record to the end of the stored list.

        Entries that cannot be read as records are written back untouched. If
        the stored text cannot be parsed at all it is copied to `backup_key`
        before the new list replaces it.
        """
        items = self._load_items()
        if items is None:
            self.storage.set_item(self.backup_key, self.storage.get_item(self.key))
            logger.warning(f"Moved unparseable local certificate data to '{self.backup_key}'")
            items = []
        items.append(record.to_dict())
        self.storage.set_item(self.key, json.dumps(items, ensure_ascii=False))
        logger.info(f"Stored certificate '{record.certificate_id}' locally ({len(items)} total)")

    def find_by_certificate_id(self, certificate_id: str) -> Optional[CertificateRecord]:
        for record in self.load():
            if record.certificate_id == certificate_id:
                return record
        return None

    def initialize_sample_data(self) -> bool:
        """Writes the two sample certificates if the store holds nothing yet."""
        if self.storage.get_item(self.key):
            return False
        self.save([CertificateRecord.from_dict(item) for item in SAMPLE_CERTIFICATES])
        logger.info("Sample certificates initialized for demo purposes")
        return True

    def clear(self) -> None:
        self.storage.remove_item(self.key)
