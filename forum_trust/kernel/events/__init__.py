"""
Append-only audit trail.
"""

from forum_trust.kernel.events.audit_recorder import AuditPage, AuditRecorder

__all__ = [
    "AuditPage",
    "AuditRecorder",
]
