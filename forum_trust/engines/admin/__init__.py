"""
Admin - homepage section controls and the staff dashboard.
"""

from forum_trust.engines.admin.dashboard import DashboardMetrics, DashboardService
from forum_trust.engines.admin.homepage_controls import HomepageControls

__all__ = ["DashboardMetrics", "DashboardService", "HomepageControls"]
