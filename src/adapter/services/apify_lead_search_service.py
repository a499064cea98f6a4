"""Actor platform client for lead search runs"""

import logging
from typing import Any, Dict, Optional
import httpx
from src.app.services.external_action import ExternalActionResult, ExternalServiceError
from src.app.services.lead_search_service import LeadSearchService

logger = logging.getLogger(__name__)

# Filter keys copied to the root of the actor input; "company" is an alias
_FILTER_KEYS = ("job_title", "company_domain", "country", "location")


def build_actor_input(filters: Dict[str, Any], fetch_count: int) -> Dict[str, Any]:
    actor_input: Dict[str, Any] = {
        "fetch_count": fetch_count,
        "email_status": ["validated"],
    }
    if filters.get("company"):
        actor_input["company_domain"] = filters["company"]
    for key in _FILTER_KEYS:
        if filters.get(key):
            actor_input[key] = filters[key]
    return actor_input


class ApifyLeadSearchService(LeadSearchService):
    """
    Starts lead search actor runs through the actor platform REST API

    POST {base_url}/acts/{actor}/runs?token=... with the filters at the root
    of the actor input. The run id in the response correlates the later
    ACTOR.RUN.* webhooks with the enrichment job.
    """

    def __init__(
        self,
        api_token: str,
        actor: str,
        base_url: str = "https://api.apify.com/v2",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_token = api_token
        self.actor = actor
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client

    async def start_search(self, filters: Dict[str, Any], fetch_count: int) -> ExternalActionResult:
        if not self.api_token:
            raise ExternalServiceError("APIFY_API_TOKEN not configured")

        url = f"{self.base_url}/acts/{self.actor}/runs"
        actor_input = build_actor_input(filters, fetch_count)
        logger.info(f"Starting actor {self.actor} with input: {actor_input}")

        try:
            if self.client is not None:
                response = await self._post(self.client, url, actor_input)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, url, actor_input)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Actor platform request failed: {e}") from e

        if response.is_error:
            raise ExternalServiceError(
                f"Actor platform error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        try:
            run_id = (response.json().get("data") or {}).get("id")
        except ValueError as e:
            raise ExternalServiceError(f"Actor platform returned invalid JSON: {e}") from e

        if not run_id:
            return ExternalActionResult.failed(
                "EXTERNAL_ACTION_FAILED", "Actor platform did not return a valid run id"
            )

        logger.info(f"Actor run started: run_id={run_id}, actor={self.actor}")
        return ExternalActionResult.ok(run_id=run_id)

    async def _post(self, client: httpx.AsyncClient, url: str, actor_input: Dict[str, Any]) -> httpx.Response:
        return await client.post(
            url,
            params={"token": self.api_token},
            json={"input": actor_input},
            headers={"Content-Type": "application/json"},
        )
