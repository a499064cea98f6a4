"""List Webhook Events Use Case

Stored events for manual inspection, newest first.
"""
from typing import Optional
from libs.result import Result, Return
from src.app.repositories.webhook_event_repository import WebhookEventRepository
from .dtos import ListWebhookEventsResponseDTO, WebhookEventDTO


class ListWebhookEvents:

    def __init__(self, event_repo: WebhookEventRepository):
        self.event_repo = event_repo

    async def execute(
        self,
        matched: Optional[bool] = None,
        provider: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Result[ListWebhookEventsResponseDTO]:
        events, total = await self.event_repo.list_events(
            matched=matched, provider=provider, limit=limit, offset=offset
        )

        return Return.ok(
            ListWebhookEventsResponseDTO(
                events=[
                    WebhookEventDTO(
                        event_id=event.event_id,
                        provider=event.provider,
                        event_type=event.event_type,
                        object_type=event.object_type.value if hasattr(event.object_type, "value") else event.object_type,
                        object_id=event.object_id,
                        account_id=event.account_id,
                        tenant_id=event.tenant_id,
                        matched=event.matched,
                        matched_record_type=event.matched_record_type,
                        matched_record_id=event.matched_record_id,
                        parser_version=event.parser_version,
                        correlation_id=event.correlation_id,
                        processed_at=event.processed_at,
                        created_at=event.created_at,
                        raw_payload=event.raw_payload,
                    )
                    for event in events
                ],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
