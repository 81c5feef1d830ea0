# src/cache/keys.py
"""Query key helpers and the canonical key roots.

Keys are ordered tuples compared by structural equality; no normalization
is applied, so ``("customers", "paginated", 1)`` and
``("customers", "paginated", 1, 50)`` are different keys.
"""

from __future__ import annotations

from typing import Hashable, Sequence

from realtycrm.cache.models import QueryKey

# Key roots (first element of every key)
CURRENT_USER_PROFILE = "currentUserProfile"
USER_PROFILE = "userProfile"
IS_CALLER_ADMIN = "isCallerAdmin"
CALLER_USER_ROLE = "callerUserRole"
OVERVIEW_METRICS = "overviewMetrics"
CRM_DASHBOARD_DATA = "crmDashboardData"
CUSTOMER_PANELS = "customerPanels"
AGENT_PANEL_DATA = "agentPanelData"
APPROVALS = "approvals"
IS_CALLER_APPROVED = "isCallerApproved"
CUSTOMERS = "customers"
CUSTOMER = "customer"
LEADS = "leads"
LEAD = "lead"
CUSTOMER_QUERIES = "customerQueries"
CUSTOMER_QUERY = "customerQuery"
FOLLOW_UPS = "followUps"
PENDING_FOLLOW_UPS = "pendingFollowUps"
FOLLOW_UP = "followUp"
TEMPLATES = "templates"
TEMPLATE = "template"
WHATSAPP_CONFIG = "whatsAppConfig"
WHATSAPP_ACTIVE = "whatsAppActive"
WHATSAPP_MESSAGE_LOGS = "whatsappMessageLogs"
AGENT_WHATSAPP_MESSAGE_LOGS = "agentWhatsappMessageLogs"
MESSAGES = "messages"
ATTENDANCE_RECORDS = "attendanceRecords"
ATTENDANCE_CSV_REPORT = "attendanceCsvReport"
CUSTOMER_PROFILE = "customerProfile"
CONFIRMATION_MESSAGE = "confirmationMessage"
CUSTOMER_DASHBOARD = "customerDashboard"


def make_key(*parts: Hashable) -> QueryKey:
    """Build a query key from its ordered parts."""
    return tuple(parts)


def as_key(key: Sequence[Hashable]) -> QueryKey:
    """Coerce a list or tuple into a query key."""
    return key if isinstance(key, tuple) else tuple(key)


def matches_prefix(key: QueryKey, prefix: QueryKey) -> bool:
    """True when ``prefix`` equals the leading elements of ``key``."""
    if len(prefix) > len(key):
        return False
    return key[: len(prefix)] == prefix


def scoped(root: str, principal: str | None, *parts: Hashable) -> QueryKey:
    """Key for per-user data, scoped by the caller principal."""
    return (root, *parts, principal)


def format_key(key: QueryKey) -> str:
    """Compact text form used in logs."""
    return "/".join("-" if p is None else str(p) for p in key)
