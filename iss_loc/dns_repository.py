"""
Cloudflare DNS Record Repository

Looks up, creates and updates the LOC record kept in sync with the ISS.

Every Cloudflare response carries the envelope
``{success, errors: [{code, message}], messages, result}``. A non-2xx status
or ``success: false`` is always a failure, whatever else the body says.
"""

from typing import Any, Dict, Optional

import pydantic
import requests

from config import CLOUDFLARE_API_BASE, DNS_TTL, HTTP_TIMEOUT
from iss_loc.errors import UpstreamAPIError, UpstreamError, UpstreamHTTPError
from iss_loc.models import DNSRecord, LOCFields
from logging_config import get_logger

logger = get_logger(__name__)

RECORD_TYPE = "LOC"


class CloudflareRecordRepository:
    """
    LOC records of one Cloudflare account, addressed by zone.

    Args:
        api_token: Bearer token with DNS edit permission
        session: HTTP session to use (default: a new requests.Session)
        base_url: API base (default: Cloudflare v4)
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        api_token: str,
        session: Optional[requests.Session] = None,
        base_url: str = CLOUDFLARE_API_BASE,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.session = session if session is not None else requests.Session()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }

    def find(self, zone_id: str, record_name: str) -> Optional[DNSRecord]:
        """Return the first LOC record named ``record_name``, or None."""
        records = self._request(
            "GET",
            f"/zones/{zone_id}/dns_records",
            operation="list",
            params={"type": RECORD_TYPE, "name": record_name},
        )
        if records is not None and not isinstance(records, list):
            raise UpstreamAPIError("Cloudflare API error: malformed response to list")
        if not records:
            logger.debug("no LOC record found", zone_id=zone_id, record_name=record_name)
            return None
        if len(records) > 1:
            logger.warning(
                "multiple LOC records found, using the first",
                record_name=record_name,
                count=len(records),
            )
        return self._record(records[0], "list")

    def create(
        self, zone_id: str, record_name: str, fields: LOCFields, ttl: int = DNS_TTL
    ) -> DNSRecord:
        result = self._request(
            "POST",
            f"/zones/{zone_id}/dns_records",
            operation="create",
            json={
                "type": RECORD_TYPE,
                "name": record_name,
                "data": fields.model_dump(),
                "ttl": ttl,
            },
        )
        return self._record(result, "create")

    def update(self, zone_id: str, record_id: str, fields: LOCFields) -> DNSRecord:
        """Overwrite the record's data in place; ttl and name are left as they are."""
        result = self._request(
            "PATCH",
            f"/zones/{zone_id}/dns_records/{record_id}",
            operation="update",
            json={"data": fields.model_dump()},
        )
        return self._record(result, "update")

    def _request(self, method: str, path: str, operation: str, **kwargs) -> Any:
        noun = "records" if operation == "list" else "record"
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                headers=self.headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Failed to {operation} DNS {noun}: {e}") from e

        if not response.ok:
            raise UpstreamHTTPError(
                f"Failed to {operation} DNS {noun}: {response.status_code} {response.reason}",
                status_code=response.status_code,
                reason=response.reason,
            )

        try:
            envelope = response.json()
        except ValueError as e:
            raise UpstreamAPIError(f"Cloudflare API error: malformed response to {operation}") from e
        if not isinstance(envelope, dict):
            raise UpstreamAPIError(f"Cloudflare API error: malformed response to {operation}")

        return self._unwrap(envelope)

    @staticmethod
    def _record(result: Any, operation: str) -> DNSRecord:
        try:
            return DNSRecord.model_validate(result)
        except pydantic.ValidationError as e:
            raise UpstreamAPIError(f"Cloudflare API error: malformed response to {operation}") from e

    @staticmethod
    def _unwrap(envelope: Dict[str, Any]) -> Any:
        if not envelope.get("success"):
            errors = envelope.get("errors") or []
            first = errors[0] if errors and isinstance(errors[0], dict) else {}
            raise UpstreamAPIError(
                f"Cloudflare API error: {first.get('message', 'unknown error')}",
                code=first.get("code"),
            )
        return envelope.get("result")
