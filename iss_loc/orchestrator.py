"""
Sync Orchestrator

One run: fetch the ISS position, encode it as LOC fields, look up the
existing record, then create or update it. Any failure aborts the run before
the next step is attempted, so a failed fetch never reaches the DNS API.

Runs are not mutually excluded. Two overlapping runs can both see no record
and both create one; the trigger interval is expected to exceed the run time.
"""

from enum import Enum
from typing import Optional

import requests

from config import DNS_TTL, SyncConfig
from iss_loc.dns_repository import CloudflareRecordRepository
from iss_loc.loc_encoder import encode, to_presentation
from iss_loc.models import SyncResult
from iss_loc.position_source import (
    PositionSource,
    TLEPositionSource,
    WhereTheISSPositionSource,
)
from logging_config import get_logger

logger = get_logger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING_POSITION = "fetching_position"
    ENCODING = "encoding"
    LOOKING_UP = "looking_up"
    CREATING = "creating"
    UPDATING = "updating"
    DONE = "done"
    FAILED = "failed"


class SyncOrchestrator:
    """
    Keeps a single LOC record in sync with the latest position.

    The orchestrator holds no data between runs; ``state`` only reports how
    far the most recent run got.
    """

    def __init__(
        self,
        position_source: PositionSource,
        repository: CloudflareRecordRepository,
        ttl: int = DNS_TTL,
    ):
        self.position_source = position_source
        self.repository = repository
        self.ttl = ttl
        self.state = SyncState.IDLE

    def run(self, zone_id: str, record_name: str) -> SyncResult:
        self._enter(SyncState.FETCHING_POSITION)
        try:
            position = self.position_source.fetch()

            self._enter(SyncState.ENCODING)
            fields = encode(position)
            logger.info("LOC data encoded", loc=to_presentation(fields))

            self._enter(SyncState.LOOKING_UP)
            existing = self.repository.find(zone_id, record_name)

            if existing is None:
                self._enter(SyncState.CREATING)
                record = self.repository.create(zone_id, record_name, fields, self.ttl)
                result = SyncResult(id=record.id, created=True)
                logger.info("Created new LOC record", record_id=record.id, record_name=record_name)
            else:
                self._enter(SyncState.UPDATING)
                self.repository.update(zone_id, existing.id, fields)
                result = SyncResult(id=existing.id, created=False)
                logger.info("Updated existing LOC record", record_id=existing.id, record_name=record_name)
        except Exception:
            self._enter(SyncState.FAILED)
            raise

        self._enter(SyncState.DONE)
        return result

    def _enter(self, state: SyncState) -> None:
        logger.debug("sync state", previous=self.state.value, state=state.value)
        self.state = state


def build_position_source(config: SyncConfig, session: requests.Session) -> PositionSource:
    if config.position_source == "tle":
        return TLEPositionSource(
            norad_id=config.norad_id,
            celestrak_base=config.celestrak_api_base,
            session=session,
            timeout=config.http_timeout,
        )
    return WhereTheISSPositionSource(
        url=config.iss_api_url, session=session, timeout=config.http_timeout
    )


def run(
    zone_id: str,
    record_name: str,
    api_token: str,
    config: Optional[SyncConfig] = None,
) -> SyncResult:
    """
    Run one sync with fresh connections and return its outcome.

    Args:
        zone_id: Cloudflare zone holding the record
        record_name: Fully qualified name of the LOC record
        api_token: Cloudflare API token
        config: Endpoint and timeout settings (default: built-in defaults)

    Raises:
        SyncError: any step failed; no later step was attempted
    """
    config = config or SyncConfig()
    with requests.Session() as session:
        orchestrator = SyncOrchestrator(
            build_position_source(config, session),
            CloudflareRecordRepository(
                api_token,
                session=session,
                base_url=config.cloudflare_api_base,
                timeout=config.http_timeout,
            ),
        )
        return orchestrator.run(zone_id, record_name)
