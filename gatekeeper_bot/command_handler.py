"""
Slash Command Handling

Parses the inbound slash command, checks the verification token, and runs
the asynchronous search that follows the immediate acknowledgment.

Flow:
1. Verify token (reject with 403 on mismatch, nothing else runs)
2. Acknowledge with 201 before touching Airtable (Slack waits ~3 seconds)
3. Query Airtable with a substring formula over the search fields
4. Format the first 10 matches as attachments
5. Post to response_url if the requester passes the ownership check
"""

import hmac
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, Callable, Mapping

import httpx

from .airtable_client import AirtableClient, AirtableError
from .authorization import AuthorizationPolicy
from .config import BridgeConfig
from .responder import DelayedResponder
from .search import build_search_formula, build_search_response

logger = logging.getLogger(__name__)

# Builds an Airtable client for a config; swapped out in tests
AirtableClientFactory = Callable[[BridgeConfig], AirtableClient]


def _as_text(value: Any) -> Optional[str]:
    """JSON bodies may carry numbers or lists where Slack sends strings."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


@dataclass(frozen=True)
class SearchRequest:
    """One slash command invocation."""
    raw_query_text: str
    requester_id: str
    callback_url: Optional[str]
    user_name: Optional[str] = None
    channel_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SearchRequest":
        """Create from a form or JSON slash command body."""
        return cls(
            raw_query_text=_as_text(payload.get("text")) or "",
            requester_id=_as_text(payload.get("user_id")) or "",
            callback_url=_as_text(payload.get("response_url")),
            user_name=_as_text(payload.get("user_name")),
            channel_id=_as_text(payload.get("channel_id")),
        )


def verify_token(token: Optional[str], expected: Optional[str]) -> bool:
    """Compare the request token with the configured one. An unset secret rejects everything."""
    if not isinstance(token, str) or not token or not expected:
        return False
    return hmac.compare_digest(token.encode(), expected.encode())


def acknowledgment(request: SearchRequest) -> Dict[str, str]:
    """Immediate reply shown to the requester while the search runs."""
    return {
        "response_type": "ephemeral",
        "text": f'Searching for records matching "{request.raw_query_text}"',
    }


async def run_search(
    request: SearchRequest,
    config: BridgeConfig,
    responder: DelayedResponder,
    authorize: AuthorizationPolicy,
    airtable_factory: AirtableClientFactory = AirtableClient,
) -> None:
    """
    Search Airtable and post the results to the request's response URL.

    Runs after the acknowledgment has been sent. Errors end this request
    only and are never re-raised.
    """
    query = request.raw_query_text

    try:
        formula = build_search_formula(query, config.search_fields)
        async with airtable_factory(config) as airtable:
            records = await airtable.select(filter_by_formula=formula, view=config.view)
    except (AirtableError, httpx.HTTPError, ValueError) as e:
        logger.error(f"Airtable search failed for {request.requester_id}: {e}", exc_info=True)
        await responder.send_failure(request.callback_url)
        return

    try:
        response = build_search_response(query, records, config)
        logger.info(f'Search "{query}" by {request.requester_id} matched {response.total} records')

        if not authorize(request, records):
            logger.info(f"Not posting results: {request.requester_id} is not authorized for \"{query}\"")
            return

        await responder.send(
            request.callback_url,
            response.text,
            attachments=response.attachments_as_dicts(),
        )
    except Exception as e:
        logger.error(f"Error handling search for {request.requester_id}: {e}", exc_info=True)
