# src/actor/http_actor.py
"""JSON-over-HTTP actor client implementing BaseActorClient.

Every call POSTs ``{"method": <wireName>, "args": [...]}`` to the backend RPC
endpoint with the caller principal in the ``X-Principal`` header. The
backend answers ``{"ok": value}`` or ``{"err": {"kind": ..., "message": ...}}``.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from realtycrm.actor.base_actor import BaseActorClient
from realtycrm.actor.errors import TransportError, error_from_kind, to_crm_error
from realtycrm.actor.models import (
    AgentPanelData,
    ApprovalStatus,
    AttendanceRecord,
    CrmDashboardData,
    CsvReport,
    Customer,
    CustomerDashboardData,
    CustomerPanels,
    CustomerProfile,
    CustomerQuery,
    CustomerQueryResponse,
    FollowUp,
    Lead,
    Message,
    MessageTemplate,
    OverviewMetrics,
    PaginatedAttendanceRecords,
    PaginatedCustomers,
    PaginatedLeads,
    Principal,
    UserApprovalInfo,
    UserProfile,
    UserRole,
    WhatsAppConfig,
    WhatsAppMessageLog,
)

logger = logging.getLogger(__name__)

_ADAPTERS: dict[Any, TypeAdapter] = {}


def _adapter(result_type: Any) -> TypeAdapter:
    adapter = _ADAPTERS.get(result_type)
    if adapter is None:
        adapter = TypeAdapter(result_type)
        _ADAPTERS[result_type] = adapter
    return adapter


def _encode(value: Any) -> Any:
    """Encode one positional argument for the wire."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, Enum):
        return value.value
    return value


class HttpActorClient(BaseActorClient):
    """httpx-based transport for the CRM backend actor."""

    def __init__(
        self,
        rpc_url: str,
        principal: Principal | None = None,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._principal = principal or None
        self._timeout_s = timeout_s
        self._transport = transport
        self.__client: httpx.AsyncClient | None = None  # Lazy initialization

    @property
    def principal(self) -> Principal | None:
        return self._principal

    @property
    def _client(self) -> httpx.AsyncClient:
        """Lazy-init the HTTP client (only on first call)."""
        if self.__client is None:
            self.__client = httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport
            )
        return self.__client

    async def aclose(self) -> None:
        if self.__client is not None:
            await self.__client.aclose()
            self.__client = None

    async def _call(self, method: str, args: list[Any], result_type: Any = None) -> Any:
        """Invoke one backend method and validate its result.

        Raises:
            CrmError: Subclass matching the failure kind.
        """
        payload = {"method": method, "args": [_encode(a) for a in args]}
        headers = {"Content-Type": "application/json"}
        if self._principal:
            headers["X-Principal"] = self._principal

        start = time.monotonic()
        try:
            resp = await self._client.post(self._rpc_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("Actor call %s timed out after %.1fs", method, self._timeout_s)
            raise to_crm_error(e) from e
        except httpx.HTTPError as e:
            logger.warning("Actor call %s failed: %s", method, e)
            raise to_crm_error(e) from e
        latency_ms = int((time.monotonic() - start) * 1000)

        try:
            body = resp.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and isinstance(body.get("err"), dict):
            err = body["err"]
            logger.debug("Actor call %s rejected: %s", method, err)
            raise error_from_kind(err.get("kind", ""), str(err.get("message", "")))

        if resp.is_error:
            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.warning("Actor call %s returned HTTP %d", method, resp.status_code)
                raise to_crm_error(e) from e

        if not isinstance(body, dict) or "ok" not in body:
            raise TransportError(f"Malformed response for {method}")

        logger.debug("Actor call %s ok (%d ms)", method, latency_ms)
        if result_type is None:
            return None
        try:
            return _adapter(result_type).validate_python(body["ok"])
        except PydanticValidationError as e:
            raise TransportError(f"Unexpected result shape for {method}: {e}") from e

    # --- User profile / role ---

    async def get_caller_user_profile(self) -> UserProfile | None:
        return await self._call("getCallerUserProfile", [], UserProfile | None)

    async def get_user_profile(self, user: Principal) -> UserProfile | None:
        return await self._call("getUserProfile", [user], UserProfile | None)

    async def is_caller_admin(self) -> bool:
        return await self._call("isCallerAdmin", [], bool)

    async def get_caller_user_role(self) -> UserRole:
        return await self._call("getCallerUserRole", [], UserRole)

    async def save_caller_user_profile(self, profile: UserProfile) -> None:
        await self._call("saveCallerUserProfile", [profile])

    async def assign_caller_user_role(self, user: Principal, role: UserRole) -> None:
        await self._call("assignCallerUserRole", [user, role])

    # --- Customers ---

    async def get_customer(self, customer_id: int) -> Customer | None:
        return await self._call("getCustomer", [customer_id], Customer | None)

    async def get_all_customers(
        self, page_index: int | None, page_size: int | None
    ) -> PaginatedCustomers:
        return await self._call(
            "getAllCustomers", [page_index, page_size], PaginatedCustomers
        )

    async def add_customer(self, customer: Customer) -> int:
        return await self._call("addCustomer", [customer], int)

    async def update_customer(self, customer_id: int, customer: Customer) -> None:
        await self._call("updateCustomer", [customer_id, customer])

    # --- Leads ---

    async def get_lead(self, lead_id: int) -> Lead | None:
        return await self._call("getLead", [lead_id], Lead | None)

    async def get_all_leads(
        self, page_index: int | None, page_size: int | None
    ) -> PaginatedLeads:
        return await self._call("getAllLeads", [page_index, page_size], PaginatedLeads)

    async def add_lead(self, lead: Lead) -> int:
        return await self._call("addLead", [lead], int)

    async def update_lead(self, lead_id: int, lead: Lead) -> None:
        await self._call("updateLead", [lead_id, lead])

    async def assign_lead(self, lead_id: int, agent_id: Principal) -> None:
        await self._call("assignLead", [lead_id, agent_id])

    async def delete_lead(self, lead_id: int) -> None:
        await self._call("deleteLead", [lead_id])

    # --- Customer queries ---

    async def get_customer_query(self, query_id: int) -> CustomerQuery | None:
        return await self._call("getCustomerQuery", [query_id], CustomerQuery | None)

    async def get_all_customer_queries(self) -> list[CustomerQuery]:
        return await self._call("getAllCustomerQueries", [], list[CustomerQuery])

    async def get_agent_customer_queries(
        self, agent_id: Principal
    ) -> list[CustomerQuery]:
        return await self._call(
            "getAgentCustomerQueries", [agent_id], list[CustomerQuery]
        )

    async def add_customer_query(self, customer_query: CustomerQuery) -> int:
        return await self._call("addCustomerQuery", [customer_query], int)

    async def update_customer_query(
        self, query_id: int, customer_query: CustomerQuery
    ) -> None:
        await self._call("updateCustomerQuery", [query_id, customer_query])

    # --- Follow-ups ---

    async def get_follow_up(self, follow_up_id: int) -> FollowUp | None:
        return await self._call("getFollowUp", [follow_up_id], FollowUp | None)

    async def get_all_follow_ups(self) -> list[FollowUp]:
        return await self._call("getAllFollowUps", [], list[FollowUp])

    async def add_follow_up(self, follow_up: FollowUp) -> int:
        return await self._call("addFollowUp", [follow_up], int)

    async def update_follow_up(self, follow_up_id: int, follow_up: FollowUp) -> None:
        await self._call("updateFollowUp", [follow_up_id, follow_up])

    # --- Templates ---

    async def get_template(self, template_id: int) -> MessageTemplate | None:
        return await self._call("getTemplate", [template_id], MessageTemplate | None)

    async def get_all_templates(self) -> list[MessageTemplate]:
        return await self._call("getAllTemplates", [], list[MessageTemplate])

    async def add_template(self, template: MessageTemplate) -> int:
        return await self._call("addTemplate", [template], int)

    async def update_template(
        self, template_id: int, template: MessageTemplate
    ) -> None:
        await self._call("updateTemplate", [template_id, template])

    async def delete_template(self, template_id: int) -> None:
        await self._call("deleteTemplate", [template_id])

    # --- WhatsApp ---

    async def get_whatsapp_config(self) -> WhatsAppConfig | None:
        return await self._call("getWhatsAppConfig", [], WhatsAppConfig | None)

    async def get_whatsapp_message_logs(self) -> list[WhatsAppMessageLog]:
        return await self._call("getWhatsAppMessageLogs", [], list[WhatsAppMessageLog])

    async def set_whatsapp_config(self, config: WhatsAppConfig) -> None:
        await self._call("setWhatsAppConfig", [config])

    async def log_whatsapp_message(self, log: WhatsAppMessageLog) -> int:
        return await self._call("logWhatsAppMessage", [log], int)

    # --- Attendance ---

    async def get_attendance_records(
        self, agent_id: Principal
    ) -> list[AttendanceRecord]:
        return await self._call(
            "getAttendanceRecords", [agent_id], list[AttendanceRecord]
        )

    async def get_all_attendance_records(
        self, page_index: int | None, page_size: int | None
    ) -> PaginatedAttendanceRecords:
        return await self._call(
            "getAllAttendanceRecords",
            [page_index, page_size],
            PaginatedAttendanceRecords,
        )

    async def get_attendance_records_csv_report(self, agent_id: Principal) -> CsvReport:
        return await self._call("getAttendanceRecordsCsvReport", [agent_id], CsvReport)

    async def record_attendance(self, record: AttendanceRecord) -> int:
        return await self._call("recordAttendance", [record], int)

    # --- Messaging ---

    async def get_messages(self, user: Principal) -> list[Message]:
        return await self._call("getMessages", [user], list[Message])

    async def send_message(self, recipient: Principal, content: str) -> int:
        return await self._call("sendMessage", [recipient, content], int)

    # --- Agent approval ---

    async def list_approvals(self) -> list[UserApprovalInfo]:
        return await self._call("listApprovals", [], list[UserApprovalInfo])

    async def is_caller_approved(self) -> bool:
        return await self._call("isCallerApproved", [], bool)

    async def get_agent_panel_data(self) -> AgentPanelData:
        return await self._call("getAgentPanelData", [], AgentPanelData)

    async def request_approval(self) -> None:
        await self._call("requestApproval", [])

    async def set_approval(self, user: Principal, status: ApprovalStatus) -> None:
        await self._call("setApproval", [user, status])

    async def change_agent_approval_status(
        self, agent_principal: Principal, status: ApprovalStatus
    ) -> None:
        await self._call("changeAgentApprovalStatus", [agent_principal, status])

    # --- Aggregates ---

    async def get_overview_metrics(self) -> OverviewMetrics:
        return await self._call("getOverviewMetrics", [], OverviewMetrics)

    async def get_crm_dashboard_data(self) -> CrmDashboardData:
        return await self._call("getCRMDashboardData", [], CrmDashboardData)

    async def get_customer_panels(self) -> CustomerPanels:
        return await self._call("getCustomerPanels", [], CustomerPanels)

    # --- Customer portal ---

    async def get_customer_profile_by_phone(
        self, phone_number: str
    ) -> CustomerProfile | None:
        return await self._call(
            "getCustomerProfileByPhone", [phone_number], CustomerProfile | None
        )

    async def get_customer_profile(self, profile_id: int) -> CustomerProfile | None:
        return await self._call("getCustomerProfile", [profile_id], CustomerProfile | None)

    async def get_customer_queries_by_phone_number(
        self, phone_number: str
    ) -> list[CustomerQueryResponse]:
        return await self._call(
            "getCustomerQueriesByPhoneNumber", [phone_number], list[CustomerQueryResponse]
        )

    async def get_customer_dashboard_data(
        self, phone_number: str
    ) -> CustomerDashboardData:
        return await self._call(
            "getCustomerDashboardData", [phone_number], CustomerDashboardData
        )

    async def get_query_confirmation_message(self) -> str:
        return await self._call("getQueryConfirmationMessage", [], str)

    async def register_customer_profile(self, profile: CustomerProfile) -> int:
        return await self._call("registerCustomerProfile", [profile], int)

    async def submit_customer_query_response(
        self, response: CustomerQueryResponse
    ) -> int:
        return await self._call("submitCustomerQueryResponse", [response], int)
