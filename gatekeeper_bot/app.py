"""
Gatekeeper Slack Bridge

FastAPI app that answers a Slack slash command by searching an Airtable
table and posting the matches back through the command's response_url.

Routes:
- GET /       health check
- POST /slack slash command endpoint (form or JSON body)

Usage:
    python -m gatekeeper_bot.app

    # Or with uvicorn for production:
    uvicorn gatekeeper_bot.app:api --host 0.0.0.0 --port 3000
"""

import os
import logging
from typing import Optional, Dict, Any

import uvicorn
from dotenv import load_dotenv
from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__
from .airtable_client import AirtableClient
from .authorization import AuthorizationPolicy, RecordOwnershipPolicy
from .command_handler import (
    AirtableClientFactory,
    SearchRequest,
    acknowledgment,
    run_search,
    verify_token,
)
from .config import BridgeConfig, get_config
from .responder import DelayedResponder

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def read_payload(request: Request) -> Dict[str, Any]:
    """Read a slash command body. Slack sends form data; JSON is accepted too."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    form = await request.form()
    return dict(form)


def create_app(
    config: Optional[BridgeConfig] = None,
    responder: Optional[DelayedResponder] = None,
    authorize: Optional[AuthorizationPolicy] = None,
    airtable_factory: AirtableClientFactory = AirtableClient,
) -> FastAPI:
    """
    Build the bridge application.

    Args:
        config: Settings; read from the environment when omitted
        responder: Delivers delayed responses to Slack
        authorize: Decides whether results are posted (defaults to RecordOwnershipPolicy)
        airtable_factory: Builds the Airtable client for each search
    """
    config = config or get_config()
    responder = responder or DelayedResponder()
    authorize = authorize or RecordOwnershipPolicy.from_config(config)

    missing = config.missing()
    if missing:
        logger.error(f"Missing configuration: {', '.join(missing)}")

    app = FastAPI(title="Gatekeeper Slack Bridge", version=__version__)
    app.state.config = config

    @app.get("/", response_class=PlainTextResponse)
    async def health():
        return "success"

    @app.post("/slack")
    async def slash_command(request: Request, background_tasks: BackgroundTasks):
        payload = await read_payload(request)

        # Verify that this request is actually coming from Slack before continuing
        if not verify_token(payload.get("token"), config.verification_token):
            logger.warning(f"Rejected slash command with bad token from {payload.get('user_id')}")
            return PlainTextResponse("Forbidden", status_code=403)

        search_request = SearchRequest.from_payload(payload)

        background_tasks.add_task(
            run_search,
            search_request,
            config,
            responder,
            authorize,
            airtable_factory,
        )
        return JSONResponse(acknowledgment(search_request), status_code=201)

    return app


api = create_app()


def main():
    """Main entry point for running the bridge."""
    port = int(os.getenv("PORT", "3000"))
    host = os.getenv("HOST", "0.0.0.0")
    logger.info(f"Gatekeeper bridge listening on {host}:{port}")
    uvicorn.run(api, host=host, port=port)


if __name__ == "__main__":
    main()
