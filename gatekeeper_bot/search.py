"""
Record Search

Builds the Airtable filter formula for a free-text query and assembles the
Slack response for the matching records.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Dict, Any

from .airtable_client import AirtableRecord
from .config import BridgeConfig, MAX_RECORDS_TO_RETURN
from .formatting import Attachment, format_record_as_attachment


def _formula_string(value: str) -> str:
    """Quote a value as an Airtable formula string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_search_formula(query: str, field_names: Sequence[str]) -> str:
    """
    Build a case-insensitive substring search across several fields.

    Example:
        >>> build_search_formula("Jane", ["First Name", "Last Name"])
        "OR(SEARCH('jane', LOWER({First Name})) > 0, SEARCH('jane', LOWER({Last Name})) > 0)"
    """
    needle = _formula_string(query.lower())
    statements = [f"SEARCH({needle}, LOWER({{{name}}})) > 0" for name in field_names]
    return f"OR({', '.join(statements)})"


def build_result_text(query: str, total: int, limit: int = MAX_RECORDS_TO_RETURN) -> str:
    """Summary line; counts every match even when only `limit` are shown."""
    text = f'Found {total} records matching "{query}"'
    if total > limit:
        text += f" (showing first {limit})"
    return text


@dataclass
class SearchResponse:
    """Message ready to be posted back to Slack."""
    text: str
    attachments: List[Attachment] = field(default_factory=list)
    total: int = 0

    def attachments_as_dicts(self) -> List[Dict[str, Any]]:
        return [a.to_dict() for a in self.attachments]


def build_search_response(
    query: str,
    records: List[AirtableRecord],
    config: BridgeConfig,
    limit: int = MAX_RECORDS_TO_RETURN,
) -> SearchResponse:
    """Format the first `limit` records and summarize the full result set."""
    return SearchResponse(
        text=build_result_text(query, len(records), limit),
        attachments=[format_record_as_attachment(r, config) for r in records[:limit]],
        total=len(records),
    )
