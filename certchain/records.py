# records.py
"""
Plain data types shared by the client services and the REST backend.

Records travel as JSON with camelCase keys, the shape the browser UI and the
REST API agree on. `to_dict`/`from_dict` translate between the two spellings.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from certchain.errors import ValidationError

REQUIRED_FIELDS = ("recipientName", "courseName", "issuerName")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class IssueRequest:
    recipient_name: str
    course_name: str
    issuer_name: str
    recipient_email: Optional[str] = None
    completion_date: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IssueRequest":
        """Builds a request from camelCase input, rejecting blank required fields."""
        if not isinstance(data, dict):
            data = {}
        missing = [name for name in REQUIRED_FIELDS if not _clean(data.get(name))]
        if missing:
            raise ValidationError(missing)
        return cls(
            recipient_name=_clean(data.get("recipientName")),
            course_name=_clean(data.get("courseName")),
            issuer_name=_clean(data.get("issuerName")),
            recipient_email=_clean(data.get("recipientEmail")),
            completion_date=_clean(data.get("completionDate")),
            description=_clean(data.get("description")),
        )

    def validate(self) -> None:
        missing = [
            camel for camel, value in zip(
                REQUIRED_FIELDS, (self.recipient_name, self.course_name, self.issuer_name))
            if not _clean(value)
        ]
        if missing:
            raise ValidationError(missing)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipientName": self.recipient_name,
            "recipientEmail": self.recipient_email,
            "courseName": self.course_name,
            "issuerName": self.issuer_name,
            "completionDate": self.completion_date,
            "description": self.description,
        }


@dataclass
class CertificateRecord:
    record_id: str
    certificate_id: str
    recipient_name: str
    course_name: str
    issuer_name: str
    issued_at: str
    blockchain_hash: str
    recipient_email: Optional[str] = None
    completion_date: Optional[str] = None
    description: Optional[str] = None
    is_valid: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.record_id,
            "certificateId": self.certificate_id,
            "recipientName": self.recipient_name,
            "recipientEmail": self.recipient_email,
            "courseName": self.course_name,
            "issuerName": self.issuer_name,
            "completionDate": self.completion_date,
            "description": self.description,
            "issuedAt": self.issued_at,
            "blockchainHash": self.blockchain_hash,
            "isValid": self.is_valid,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CertificateRecord":
        return cls(
            record_id=str(data.get("_id", "")),
            certificate_id=data["certificateId"],
            recipient_name=data.get("recipientName", ""),
            course_name=data.get("courseName", ""),
            issuer_name=data.get("issuerName", ""),
            issued_at=data.get("issuedAt", ""),
            blockchain_hash=data.get("blockchainHash", ""),
            recipient_email=data.get("recipientEmail"),
            completion_date=data.get("completionDate"),
            description=data.get("description"),
            is_valid=bool(data.get("isValid", True)),
        )


@dataclass
class OnChainCertificate:
    certificate_id: str
    hash: str
    timestamp: int
    issuer: str
    is_valid: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "certificateId": self.certificate_id,
            "hash": self.hash,
            "timestamp": self.timestamp,
            "issuer": self.issuer,
            "isValid": self.is_valid,
        }
