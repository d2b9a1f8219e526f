"""
Record Ownership Check

Decides whether search results may be posted back to the requester.

This is a placeholder allow-list and not a security boundary: a requester
passes when they own a record whose first name equals their query exactly,
or when their Slack user id is on the superuser list.
"""

from typing import Callable, Iterable, Sequence, Any

from .airtable_client import AirtableRecord
from .config import BridgeConfig, DISPLAY_FIELD, OWNER_FIELD

# (request, records) -> bool. Any callable with this shape can replace the default policy.
AuthorizationPolicy = Callable[[Any, Sequence[AirtableRecord]], bool]


def is_authorized_for_record(
    requester_id: str,
    query_text: str,
    record: AirtableRecord,
    superuser_ids: Iterable[str] = (),
    owner_field: str = OWNER_FIELD,
    name_field: str = DISPLAY_FIELD,
) -> bool:
    """
    Check one (requester, record) pair.

    Args:
        requester_id: Slack user id of the person running the command
        query_text: Raw query text, compared case-sensitively
        record: Candidate record
        superuser_ids: User ids that pass regardless of the record

    Returns:
        True if the requester may see results for this record
    """
    if requester_id in superuser_ids:
        return True
    return requester_id == record.get(owner_field) and query_text == record.get(name_field)


class RecordOwnershipPolicy:
    """Passes when the requester is a superuser or owns any of the records."""

    def __init__(
        self,
        superuser_ids: Iterable[str] = (),
        owner_field: str = OWNER_FIELD,
        name_field: str = DISPLAY_FIELD,
    ):
        self.superuser_ids = frozenset(superuser_ids)
        self.owner_field = owner_field
        self.name_field = name_field

    @classmethod
    def from_config(cls, config: BridgeConfig) -> "RecordOwnershipPolicy":
        return cls(
            superuser_ids=config.superuser_ids,
            owner_field=config.owner_field,
            name_field=config.display_field,
        )

    def __call__(self, request, records: Sequence[AirtableRecord]) -> bool:
        if request.requester_id in self.superuser_ids:
            return True
        return any(
            is_authorized_for_record(
                request.requester_id,
                request.raw_query_text,
                record,
                owner_field=self.owner_field,
                name_field=self.name_field,
            )
            for record in records
        )
