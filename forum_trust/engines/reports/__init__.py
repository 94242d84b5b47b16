"""
Report lifecycle - filing, triage and resolution of content reports.
"""

from forum_trust.engines.reports.report_service import ReportService, report_audit_action, status_fields

__all__ = ["ReportService", "report_audit_action", "status_fields"]
