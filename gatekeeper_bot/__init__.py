"""
Gatekeeper Slack Bridge

A slash command webhook that searches an Airtable table and posts the
matching records back to Slack.

Features:
- Immediate ephemeral acknowledgment within Slack's 3 second window
- Case-insensitive substring search over configurable fields
- Records rendered as Slack attachments (title link + up to 6 fields)
- Results only posted to record owners or configured superusers
"""

__version__ = "1.0.0"
