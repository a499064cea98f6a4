"""Contact enrichment API client for phone reveals"""

import logging
from typing import Optional
import httpx
from src.app.services.external_action import ExternalActionResult, ExternalServiceError
from src.app.services.phone_enrichment_service import PhoneEnrichmentService

logger = logging.getLogger(__name__)


class ApolloPhoneEnrichmentService(PhoneEnrichmentService):

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.apollo.io/v1",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client

    async def reveal_phone(self, email: str) -> ExternalActionResult:
        """
        POST {base_url}/people/match for one email

        Returns the first sanitized phone number, or a PHONE_NOT_FOUND
        failure when the person has none.
        """
        if not self.api_key:
            raise ExternalServiceError("APOLLO_API_KEY not configured")

        payload = {"email": email, "reveal_phone_number": True}
        headers = {
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "X-Api-Key": self.api_key,
        }
        url = f"{self.base_url}/people/match"

        try:
            if self.client is not None:
                response = await self.client.post(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Contact enrichment request failed: {e}") from e

        if response.is_error:
            raise ExternalServiceError(
                f"Contact enrichment API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        try:
            person = response.json().get("person") or {}
        except ValueError as e:
            raise ExternalServiceError(f"Contact enrichment API returned invalid JSON: {e}") from e

        numbers = person.get("phone_numbers") or []
        phone = numbers[0].get("sanitized_number") if numbers else None

        if not phone:
            logger.info(f"No phone found for {email}")
            return ExternalActionResult.failed(
                "PHONE_NOT_FOUND", f"No phone number found for {email}", person=person
            )

        return ExternalActionResult.ok(phone=phone, person=person)
