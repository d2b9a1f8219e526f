"""
Slack Attachment Formatting

Turns Airtable records into legacy Slack message attachments.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any

from .airtable_client import AirtableRecord
from .config import BridgeConfig, MAX_ATTACHMENT_FIELDS

UNTITLED_RECORD = "Untitled record"

# Values shorter than this render side by side
COMPACT_VALUE_LENGTH = 25


def slack_escape(text: str) -> str:
    """Escape the control characters Slack reserves in message text."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


@dataclass
class AttachmentField:
    """One title/value row inside an attachment."""
    title: str
    value: str
    compact: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "value": self.value, "short": self.compact}


@dataclass
class Attachment:
    """A Slack attachment describing one record."""
    title: str
    title_link: str
    fields: List[AttachmentField] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape Slack expects."""
        return {
            "title": self.title,
            "fallback": self.title,
            "title_link": self.title_link,
            "fields": [f.to_dict() for f in self.fields],
        }


def format_record_as_attachment(
    record: AirtableRecord,
    config: BridgeConfig,
    max_fields: int = MAX_ATTACHMENT_FIELDS,
) -> Attachment:
    """
    Format an Airtable record as a Slack attachment.

    The display field becomes the title and is left out of the field list.
    Remaining non-empty fields are kept in record order, up to max_fields.

    Args:
        record: Record to format
        config: Supplies the display field and the record link base
        max_fields: Cap on the number of attachment fields

    Returns:
        Attachment for the record
    """
    title_value = record.get(config.display_field) or UNTITLED_RECORD
    attachment = Attachment(
        title=slack_escape(str(title_value)),
        title_link=config.record_link(record.id),
    )

    for field_name, raw_value in record.fields.items():
        if len(attachment.fields) >= max_fields:
            break

        if field_name == config.display_field:
            continue

        if not raw_value:
            continue

        value = raw_value if isinstance(raw_value, str) else str(raw_value)
        attachment.fields.append(AttachmentField(
            title=slack_escape(field_name),
            value=slack_escape(value),
            compact=len(value) < COMPACT_VALUE_LENGTH,
        ))

    return attachment
