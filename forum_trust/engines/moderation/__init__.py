"""
Moderation - content trust state machine, restriction ledger and discussion
control flags.
"""

from forum_trust.engines.moderation.discussion_controls import DiscussionControls
from forum_trust.engines.moderation.moderation_engine import (
    ModerationEngine,
    TransitionResult,
    audit_action_for,
)
from forum_trust.engines.moderation.restriction_ledger import RestrictionLedger, restriction_for

__all__ = [
    "DiscussionControls",
    "ModerationEngine",
    "RestrictionLedger",
    "TransitionResult",
    "audit_action_for",
    "restriction_for",
]
