# certchain/models.py
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

from certchain.services.hash_service import isoformat_utc

db = SQLAlchemy()


def _utcnow():
    return datetime.now(timezone.utc)


class Certificate(db.Model):
    __tablename__ = "certificates"
    id = db.Column(db.Integer, primary_key=True)
    certificate_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    recipient_name = db.Column(db.String(255), nullable=False)
    recipient_email = db.Column(db.String(255), nullable=True)
    course_name = db.Column(db.String(255), nullable=False)
    issuer_name = db.Column(db.String(255), nullable=False)
    completion_date = db.Column(db.Date, nullable=True)
    description = db.Column(db.Text, nullable=True)
    issued_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    blockchain_hash = db.Column(db.String(66), nullable=False)
    is_valid = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        issued_at = self.issued_at
        if issued_at is not None and issued_at.tzinfo is None:
            # SQLite hands back naive datetimes; they were stored as UTC.
            issued_at = issued_at.replace(tzinfo=timezone.utc)
        return {
            "_id": str(self.id),
            "certificateId": self.certificate_id,
            "recipientName": self.recipient_name,
            "recipientEmail": self.recipient_email,
            "courseName": self.course_name,
            "issuerName": self.issuer_name,
            "completionDate": self.completion_date.isoformat() if self.completion_date else None,
            "description": self.description,
            "issuedAt": isoformat_utc(issued_at) if issued_at else None,
            "blockchainHash": self.blockchain_hash,
            "isValid": self.is_valid,
        }
