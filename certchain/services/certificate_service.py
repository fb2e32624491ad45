# services/certificate_service.py
"""
Client for the certificate REST API with a local-storage fallback.

Each operation first asks the API. If the API cannot be reached or answers
with an error status, the same operation is simulated against the
LocalCertificateStore and answered in the shape the API would have used.
Only validation, not-found and malformed-write failures ever reach the caller.
"""
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import quote

from dateutil import parser as date_parser

from certchain.config import config_getter
from certchain.errors import MalformedResponseError, NotFoundError, TransportError, ValidationError
from certchain.records import CertificateRecord, IssueRequest
from certchain.services import hash_service
from certchain.services.fallback import resolve
from certchain.services.local_store import JsonFileStorage, LocalCertificateStore
from certchain.services.transport import HttpTransport

logger = logging.getLogger(__name__)

FALLBACK_STATUS = "local-fallback"


def _issued_at_key(record: CertificateRecord):
    try:
        return date_parser.isoparse(record.issued_at).timestamp()
    except (ValueError, TypeError, OverflowError):
        return float("-inf")


def sort_newest_first(records: List[CertificateRecord]) -> List[CertificateRecord]:
    """Orders records by issuedAt, newest first. Ties keep their stored order."""
    return sorted(records, key=_issued_at_key, reverse=True)


class CertificateService:
    def __init__(
        self,
        transport,
        store: LocalCertificateStore,
        fallback_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], Any] = hash_service.utc_now,
        rng: Optional[random.Random] = None,
    ):
        self.transport = transport
        self.store = store
        self.fallback_delay = fallback_delay
        self.sleep = sleep
        self.clock = clock
        self.rng = rng

    def _simulate_latency(self) -> None:
        if self.fallback_delay > 0:
            self.sleep(self.fallback_delay)

    def _build_record(self, request: IssueRequest) -> CertificateRecord:
        now = self.clock()
        return CertificateRecord(
            record_id=hash_service.generate_record_id(now),
            certificate_id=hash_service.generate_certificate_id(self.rng, now),
            recipient_name=request.recipient_name,
            recipient_email=request.recipient_email,
            course_name=request.course_name,
            issuer_name=request.issuer_name,
            completion_date=request.completion_date,
            description=request.description,
            issued_at=hash_service.isoformat_utc(now),
            blockchain_hash=hash_service.generate_blockchain_hash(self.rng),
            is_valid=True,
        )

    # --- Issue ---

    def issue(self, request: Union[IssueRequest, Dict[str, Any]]) -> Dict[str, str]:
        """Issues a certificate and returns {"certificateId": ...}."""
        if isinstance(request, IssueRequest):
            request.validate()
        else:
            request = IssueRequest.from_dict(request)
        logger.info(f"Issuing certificate for '{request.recipient_name}' ({request.course_name})")

        def remote():
            response = self.transport.post("/certificates", request.to_dict())
            # The POST was accepted, so the write happened remotely and must not be repeated locally.
            if not isinstance(response, dict) or not response.get("certificateId"):
                logger.error(f"Issue accepted by the API but the response carried no certificateId: {response!r}")
                raise MalformedResponseError(
                    "API accepted the certificate but returned no certificateId", payload=response)
            return {"certificateId": response["certificateId"]}

        def local():
            self._simulate_latency()
            record = self._build_record(request)
            self.store.append(record)
            return {"certificateId": record.certificate_id}

        return resolve("issue", remote, local)

    # --- Verify ---

    def verify(self, certificate_id: str) -> CertificateRecord:
        """Looks a certificate up by its certificateId, raising NotFoundError if no source has it."""
        certificate_id = (certificate_id or "").strip()
        if not certificate_id:
            raise ValidationError(["certificateId"])
        logger.info(f"Verifying certificate '{certificate_id}'")

        def remote():
            response = self.transport.get(f"/certificates/verify/{quote(certificate_id, safe='')}")
            try:
                return CertificateRecord.from_dict(response)
            except (KeyError, TypeError, AttributeError) as e:
                raise TransportError(f"API Error: malformed certificate payload: {e}") from e

        def local():
            self._simulate_latency()
            record = self.store.find_by_certificate_id(certificate_id)
            if record is None:
                raise NotFoundError(certificate_id)
            return record

        return resolve("verify", remote, local)

    # --- List ---

    def get_all(self) -> List[CertificateRecord]:
        logger.info("Fetching all certificates")

        def remote():
            response = self.transport.get("/certificates")
            if not isinstance(response, list):
                raise TransportError("API Error: certificate list was not a JSON array")
            try:
                return [CertificateRecord.from_dict(item) for item in response]
            except (KeyError, TypeError, AttributeError) as e:
                raise TransportError(f"API Error: malformed certificate payload: {e}") from e

        def local():
            self._simulate_latency()
            return sort_newest_first(self.store.load())

        return resolve("get_all", remote, local)

    # --- Health ---

    def health_check(self) -> Dict[str, str]:
        """Reports API liveness, or the local-fallback sentinel. Never raises."""
        try:
            response = self.transport.get("/health")
            if isinstance(response, dict) and response.get("status"):
                return {"status": str(response["status"]), "timestamp": str(response.get("timestamp", ""))}
            raise TransportError("API Error: malformed health response")
        except TransportError as e:
            logger.warning(f"Backend health check failed, using local storage mode: {e}")
        except Exception:
            logger.exception("Unexpected error during health check")
        return {"status": FALLBACK_STATUS, "timestamp": hash_service.isoformat_utc(self.clock())}


def create_certificate_service(cfg, storage=None, seed_samples: bool = True, sleep=time.sleep) -> CertificateService:
    """Builds a CertificateService from a configuration object (a Config class or app.config)."""
    get = config_getter(cfg)

    transport = HttpTransport(get('CERTCHAIN_API_URL'), timeout=get('CERTCHAIN_REQUEST_TIMEOUT', 5.0))
    if storage is None:
        storage = JsonFileStorage(get('CERTCHAIN_STORAGE_PATH'))
    store = LocalCertificateStore(storage, key=get('CERTCHAIN_STORAGE_KEY'))
    if seed_samples:
        store.initialize_sample_data()
    return CertificateService(
        transport,
        store,
        fallback_delay=get('CERTCHAIN_FALLBACK_DELAY', 1.0),
        sleep=sleep,
    )
