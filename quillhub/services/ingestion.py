"""Client for the enrichment / search-ingestion service.

Calls are made from detached tasks (see ``quillhub.core.tasks``); errors
propagate to the task and end up in the log, never at the caller.
"""

import logging

import httpx

from quillhub.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class IngestionClient:
    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._base_url = settings.ingestion_service_url.rstrip("/")
        self._api_key = settings.shared_api_key

    @property
    def enabled(self) -> bool:
        return bool(self._base_url)

    async def ingest_entity(self, entity_type: str, entity_id: str, payload: dict) -> None:
        if not self.enabled:
            logger.debug("Ingestion disabled, skipping %s %s", entity_type, entity_id)
            return

        body = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "payload": payload,
        }
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(
                f"{self._base_url}/ingest",
                json=body,
                headers={"X-API-KEY": self._api_key},
            )
            resp.raise_for_status()
        logger.info("Ingested %s %s", entity_type, entity_id)
