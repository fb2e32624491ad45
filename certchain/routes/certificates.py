# routes/certificates.py
from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError
from dateutil import parser

from certchain.errors import ValidationError
from certchain.models import db, Certificate
from certchain.records import IssueRequest
from certchain.services import hash_service

certificates_bp = Blueprint("certificates", __name__, url_prefix='/api')

# Attempts at drawing an unused certificateId before giving up.
MAX_ID_ATTEMPTS = 5


def _parse_completion_date(value):
    if not value:
        return None
    try:
        return parser.isoparse(value).date()
    except (ValueError, TypeError, OverflowError):
        raise ValidationError(["completionDate"], f"completionDate is not an ISO date: {value}")


@certificates_bp.route("/health", methods=["GET"])
def health():
    return jsonify(status="OK", timestamp=hash_service.isoformat_utc(hash_service.utc_now()))


@certificates_bp.route("/certificates", methods=["POST"])
def issue_certificate():
    """Creates a certificate record and returns its generated certificateId."""
    if not request.is_json:
        return jsonify(error="Request body must be JSON"), 400
    try:
        issue = IssueRequest.from_dict(request.get_json(silent=True) or {})
        completion_date = _parse_completion_date(issue.completion_date)
    except ValidationError as e:
        return jsonify(error=str(e), fields=e.missing_fields), 400

    # certificate_id is a unique column here; a collision redraws the id.
    for attempt in range(1, MAX_ID_ATTEMPTS + 1):
        cert = Certificate(
            certificate_id=hash_service.generate_certificate_id(),
            recipient_name=issue.recipient_name,
            recipient_email=issue.recipient_email,
            course_name=issue.course_name,
            issuer_name=issue.issuer_name,
            completion_date=completion_date,
            description=issue.description,
            blockchain_hash=hash_service.generate_blockchain_hash(),
            is_valid=True,
        )
        try:
            db.session.add(cert)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning(f"certificateId collision on attempt {attempt}, drawing a new one")
            continue
        current_app.logger.info(f"Issued certificate '{cert.certificate_id}' to '{cert.recipient_name}'")
        return jsonify(certificateId=cert.certificate_id), 201

    current_app.logger.error("Could not allocate a unique certificateId")
    return jsonify(error="Could not allocate a unique certificate ID"), 503


@certificates_bp.route("/certificates/verify/<string:certificate_id>", methods=["GET"])
def verify_certificate(certificate_id):
    cert = Certificate.query.filter_by(certificate_id=certificate_id).first()
    if not cert:
        return jsonify(error="Certificate not found"), 404
    return jsonify(cert.to_dict())


@certificates_bp.route("/certificates", methods=["GET"])
def list_certificates():
    """Returns every certificate, newest first."""
    certificates = Certificate.query.order_by(Certificate.issued_at.desc(), Certificate.id.desc()).all()
    return jsonify([cert.to_dict() for cert in certificates])
