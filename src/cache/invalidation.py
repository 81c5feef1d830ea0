# src/cache/invalidation.py
"""Static invalidation graph: mutation name → key prefixes made stale.

Aggregates (overview metrics, agent panel, WhatsApp logs) depend on the
entities written by these mutations, so every edge lists them explicitly.
"""

from __future__ import annotations

from realtycrm.cache import keys as k
from realtycrm.cache.models import QueryKey

_WHATSAPP_LOGS: tuple[QueryKey, ...] = (
    (k.WHATSAPP_MESSAGE_LOGS,),
    (k.AGENT_WHATSAPP_MESSAGE_LOGS,),
)

INVALIDATION_EDGES: dict[str, tuple[QueryKey, ...]] = {
    # Users
    "save_caller_user_profile": (
        (k.CURRENT_USER_PROFILE,),
        (k.IS_CALLER_ADMIN,),
        (k.CALLER_USER_ROLE,),
    ),
    "assign_caller_user_role": (
        (k.CALLER_USER_ROLE,),
        (k.IS_CALLER_ADMIN,),
        (k.AGENT_PANEL_DATA,),
    ),
    # Agent approval
    "change_agent_approval_status": (
        (k.AGENT_PANEL_DATA,),
        (k.OVERVIEW_METRICS,),
        (k.APPROVALS,),
    ),
    "request_approval": ((k.IS_CALLER_APPROVED,), (k.APPROVALS,)),
    "set_approval": (
        (k.APPROVALS,),
        (k.AGENT_PANEL_DATA,),
        (k.OVERVIEW_METRICS,),
    ),
    # Customers
    "add_customer": ((k.CUSTOMERS,), (k.CUSTOMER,), (k.OVERVIEW_METRICS,)),
    "update_customer": ((k.CUSTOMERS,), (k.CUSTOMER,), (k.OVERVIEW_METRICS,)),
    # Leads
    "create_lead": ((k.LEADS,), (k.LEAD,), (k.OVERVIEW_METRICS,), *_WHATSAPP_LOGS),
    "update_lead": ((k.LEADS,), (k.LEAD,), (k.OVERVIEW_METRICS,)),
    "assign_lead": ((k.LEADS,), (k.LEAD,), (k.OVERVIEW_METRICS,), (k.AGENT_WHATSAPP_MESSAGE_LOGS,)),
    "delete_lead": ((k.LEADS,), (k.LEAD,), (k.OVERVIEW_METRICS,)),
    # Customer queries
    "create_customer_query": (
        (k.CUSTOMER_QUERIES,),
        (k.OVERVIEW_METRICS,),
        (k.CUSTOMER_PANELS,),
    ),
    "update_customer_query": (
        (k.CUSTOMER_QUERIES,),
        (k.CUSTOMER_QUERY,),
        (k.OVERVIEW_METRICS,),
        (k.CUSTOMER_PANELS,),
    ),
    # Follow-ups
    "add_follow_up": (
        (k.FOLLOW_UPS,),
        (k.PENDING_FOLLOW_UPS,),
        (k.OVERVIEW_METRICS,),
        *_WHATSAPP_LOGS,
    ),
    "update_follow_up": (
        (k.FOLLOW_UPS,),
        (k.FOLLOW_UP,),
        (k.PENDING_FOLLOW_UPS,),
        (k.OVERVIEW_METRICS,),
    ),
    # Templates
    "save_template": ((k.TEMPLATES,), (k.TEMPLATE,)),
    "delete_template": ((k.TEMPLATES,), (k.TEMPLATE,)),
    # WhatsApp
    "set_whatsapp_config": ((k.WHATSAPP_ACTIVE,), (k.WHATSAPP_CONFIG,)),
    "log_whatsapp_message": _WHATSAPP_LOGS,
    # Messaging
    "send_message": ((k.MESSAGES,),),
    # Attendance
    "record_attendance": ((k.ATTENDANCE_RECORDS,), (k.ATTENDANCE_CSV_REPORT,), (k.OVERVIEW_METRICS,)),
    # Customer portal
    "customer_login": ((k.CUSTOMER_PROFILE,),),
    "register_customer_profile": ((k.CUSTOMER_PROFILE,),),
    "submit_customer_query": ((k.CUSTOMER_QUERIES,), (k.CUSTOMER_DASHBOARD,)),
}


def edges_for(mutation: str) -> tuple[QueryKey, ...]:
    """Key prefixes invalidated by ``mutation``.

    Raises:
        KeyError: If the mutation has no registered edge.
    """
    try:
        return INVALIDATION_EDGES[mutation]
    except KeyError:
        raise KeyError(f"No invalidation edges for mutation {mutation!r}") from None
