"""
Bridge Configuration

Environment-driven settings for the slash command bridge.

All values are read when a BridgeConfig is constructed, so tests and the app
factory can build one explicitly instead of relying on module globals.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, List, Tuple

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_API_URL = "https://api.airtable.com/v0"
DEFAULT_RECORD_URL = "https://airtable.com"
DEFAULT_SEARCH_FIELDS = "First Name,Last Name"
DEFAULT_TIMEOUT = 30.0

# Field used as the attachment title and matched against the query by the gate
DISPLAY_FIELD = "First Name"
# Field holding the Slack user id that owns a record
OWNER_FIELD = "User ID"

MAX_ATTACHMENT_FIELDS = 6
MAX_RECORDS_TO_RETURN = 10

# 'string' cellFormat requires userLocale and timeZone to be sent as well
CELL_FORMAT = "string"
USER_LOCALE = "en-us"
TIME_ZONE = "America/New_York"


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass
class BridgeConfig:
    """Slack and Airtable settings from environment variables."""

    verification_token: Optional[str] = field(default_factory=lambda: os.getenv("SLACK_VERIFICATION_TOKEN"))
    airtable_api_key: Optional[str] = field(default_factory=lambda: os.getenv("AIRTABLE_API_KEY"))
    base_id: Optional[str] = field(default_factory=lambda: os.getenv("AIRTABLE_BASE_ID"))
    table_id: Optional[str] = field(default_factory=lambda: os.getenv("AIRTABLE_TABLE_ID"))
    api_url: str = field(default_factory=lambda: os.getenv("AIRTABLE_API_URL", DEFAULT_API_URL))
    record_url_base: str = field(default_factory=lambda: os.getenv("AIRTABLE_RECORD_URL", DEFAULT_RECORD_URL))
    view: Optional[str] = field(default_factory=lambda: os.getenv("AIRTABLE_VIEW") or None)
    timeout: float = field(default_factory=lambda: float(os.getenv("AIRTABLE_TIMEOUT", DEFAULT_TIMEOUT)))
    search_fields: Tuple[str, ...] = field(
        default_factory=lambda: _split_csv(os.getenv("SEARCH_FIELDS", DEFAULT_SEARCH_FIELDS))
    )
    superuser_ids: Tuple[str, ...] = field(
        default_factory=lambda: _split_csv(os.getenv("SLACK_SUPERUSER_IDS", ""))
    )
    display_field: str = DISPLAY_FIELD
    owner_field: str = OWNER_FIELD

    @property
    def table_url(self) -> str:
        """REST endpoint for the configured table."""
        return f"{self.api_url.rstrip('/')}/{self.base_id}/{self.table_id}"

    def record_link(self, record_id: str) -> str:
        """Link to a record in the Airtable web UI."""
        return f"{self.record_url_base.rstrip('/')}/{self.table_id}/{record_id}"

    def missing(self) -> List[str]:
        """Names of required environment variables that are not set."""
        required = {
            "SLACK_VERIFICATION_TOKEN": self.verification_token,
            "AIRTABLE_API_KEY": self.airtable_api_key,
            "AIRTABLE_BASE_ID": self.base_id,
            "AIRTABLE_TABLE_ID": self.table_id,
        }
        return [name for name, value in required.items() if not value]


def get_config() -> BridgeConfig:
    """Get current bridge configuration."""
    return BridgeConfig()
