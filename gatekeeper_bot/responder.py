"""
Delayed Slack Responses

Posts follow-up messages to the `response_url` Slack hands out with each
slash command. Delivery is fire-and-forget: failures are logged, never raised.
"""

import logging
from typing import Optional, List, Dict, Any, Callable

from slack_sdk.webhook.async_client import AsyncWebhookClient

logger = logging.getLogger(__name__)

FAILURE_TEXT = "Failed to fetch records from Airtable"

# Builds a webhook client for a response_url
WebhookClientFactory = Callable[[str], AsyncWebhookClient]


class DelayedResponder:
    """
    Sends messages to slash command response URLs.

    Args:
        client_factory: Callable returning an AsyncWebhookClient for a URL
    """

    def __init__(self, client_factory: Optional[WebhookClientFactory] = None):
        self.client_factory = client_factory or AsyncWebhookClient

    async def send(
        self,
        response_url: Optional[str],
        text: str,
        attachments: Optional[List[Dict[str, Any]]] = None,
        response_type: str = "ephemeral",
    ) -> bool:
        """
        Post a message to a response URL.

        Returns:
            True if Slack accepted the message
        """
        if not response_url:
            logger.warning("No response_url on request, dropping delayed response")
            return False

        client = self.client_factory(response_url)
        try:
            response = await client.send(
                text=text,
                attachments=attachments,
                response_type=response_type,
            )
        except Exception as e:
            logger.error(f"Failed to post delayed response: {e}", exc_info=True)
            return False

        if response.status_code != 200:
            logger.warning(
                f"Slack rejected delayed response: status={response.status_code}, body={response.body}"
            )
            return False

        logger.debug(f"Delayed response delivered ({len(attachments or [])} attachments)")
        return True

    async def send_failure(self, response_url: Optional[str]) -> bool:
        """Tell the requester the Airtable lookup failed."""
        return await self.send(response_url, FAILURE_TEXT)
