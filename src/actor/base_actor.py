# src/actor/base_actor.py
"""Abstract remote actor client: the CRM backend contract.

Every call is asynchronous and independently failable. Pagination uses a
1-based page index; ``page_index=None, page_size=None`` returns everything.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

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


class BaseActorClient(ABC):
    """Unified interface for CRM backend transports."""

    @property
    @abstractmethod
    def principal(self) -> Principal | None:
        """Principal the calls are made as (None = anonymous)."""

    async def aclose(self) -> None:
        """Release transport resources. No-op by default."""

    async def __aenter__(self) -> BaseActorClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- User profile / role ---

    @abstractmethod
    async def get_caller_user_profile(self) -> UserProfile | None:
        """Profile of the calling principal."""

    @abstractmethod
    async def get_user_profile(self, user: Principal) -> UserProfile | None:
        """Profile of another principal."""

    @abstractmethod
    async def is_caller_admin(self) -> bool:
        """Whether the caller holds the admin role."""

    @abstractmethod
    async def get_caller_user_role(self) -> UserRole:
        """Role of the caller."""

    @abstractmethod
    async def save_caller_user_profile(self, profile: UserProfile) -> None:
        """Create or replace the caller's profile."""

    @abstractmethod
    async def assign_caller_user_role(self, user: Principal, role: UserRole) -> None:
        """Assign a role to a principal (admin only)."""

    # --- Customers ---

    @abstractmethod
    async def get_customer(self, customer_id: int) -> Customer | None:
        """Single customer by id."""

    @abstractmethod
    async def get_all_customers(
        self, page_index: int | None, page_size: int | None
    ) -> PaginatedCustomers:
        """Customers, one page or all."""

    @abstractmethod
    async def add_customer(self, customer: Customer) -> int:
        """Create a customer, returning its id."""

    @abstractmethod
    async def update_customer(self, customer_id: int, customer: Customer) -> None:
        """Replace a customer."""

    # --- Leads ---

    @abstractmethod
    async def get_lead(self, lead_id: int) -> Lead | None:
        """Single lead by id."""

    @abstractmethod
    async def get_all_leads(
        self, page_index: int | None, page_size: int | None
    ) -> PaginatedLeads:
        """Leads, one page or all."""

    @abstractmethod
    async def add_lead(self, lead: Lead) -> int:
        """Create a lead, returning its id."""

    @abstractmethod
    async def update_lead(self, lead_id: int, lead: Lead) -> None:
        """Replace a lead."""

    @abstractmethod
    async def assign_lead(self, lead_id: int, agent_id: Principal) -> None:
        """Assign a lead to an agent."""

    @abstractmethod
    async def delete_lead(self, lead_id: int) -> None:
        """Delete a lead."""

    # --- Customer queries ---

    @abstractmethod
    async def get_customer_query(self, query_id: int) -> CustomerQuery | None:
        """Single customer query by id."""

    @abstractmethod
    async def get_all_customer_queries(self) -> list[CustomerQuery]:
        """All customer queries (admin view)."""

    @abstractmethod
    async def get_agent_customer_queries(
        self, agent_id: Principal
    ) -> list[CustomerQuery]:
        """Customer queries assigned to an agent."""

    @abstractmethod
    async def add_customer_query(self, customer_query: CustomerQuery) -> int:
        """Create a customer query, returning its id."""

    @abstractmethod
    async def update_customer_query(
        self, query_id: int, customer_query: CustomerQuery
    ) -> None:
        """Replace a customer query."""

    # --- Follow-ups ---

    @abstractmethod
    async def get_follow_up(self, follow_up_id: int) -> FollowUp | None:
        """Single follow-up by id."""

    @abstractmethod
    async def get_all_follow_ups(self) -> list[FollowUp]:
        """All follow-ups."""

    @abstractmethod
    async def add_follow_up(self, follow_up: FollowUp) -> int:
        """Create a follow-up, returning its id."""

    @abstractmethod
    async def update_follow_up(self, follow_up_id: int, follow_up: FollowUp) -> None:
        """Replace a follow-up."""

    # --- Templates ---

    @abstractmethod
    async def get_template(self, template_id: int) -> MessageTemplate | None:
        """Single template by id."""

    @abstractmethod
    async def get_all_templates(self) -> list[MessageTemplate]:
        """All message templates."""

    @abstractmethod
    async def add_template(self, template: MessageTemplate) -> int:
        """Create a template, returning its id."""

    @abstractmethod
    async def update_template(
        self, template_id: int, template: MessageTemplate
    ) -> None:
        """Replace a template."""

    @abstractmethod
    async def delete_template(self, template_id: int) -> None:
        """Delete a template."""

    # --- WhatsApp ---

    @abstractmethod
    async def get_whatsapp_config(self) -> WhatsAppConfig | None:
        """Current WhatsApp Business configuration."""

    @abstractmethod
    async def get_whatsapp_message_logs(self) -> list[WhatsAppMessageLog]:
        """All WhatsApp message logs."""

    @abstractmethod
    async def set_whatsapp_config(self, config: WhatsAppConfig) -> None:
        """Replace the WhatsApp configuration."""

    @abstractmethod
    async def log_whatsapp_message(self, log: WhatsAppMessageLog) -> int:
        """Append a WhatsApp message log, returning its id."""

    # --- Attendance ---

    @abstractmethod
    async def get_attendance_records(
        self, agent_id: Principal
    ) -> list[AttendanceRecord]:
        """Attendance records of one agent, oldest first."""

    @abstractmethod
    async def get_all_attendance_records(
        self, page_index: int | None, page_size: int | None
    ) -> PaginatedAttendanceRecords:
        """Attendance records of every agent, one page or all."""

    @abstractmethod
    async def get_attendance_records_csv_report(self, agent_id: Principal) -> CsvReport:
        """Flattened attendance report of one agent."""

    @abstractmethod
    async def record_attendance(self, record: AttendanceRecord) -> int:
        """Submit a full attendance record, returning its id."""

    # --- Messaging ---

    @abstractmethod
    async def get_messages(self, user: Principal) -> list[Message]:
        """Messages sent to or by a principal."""

    @abstractmethod
    async def send_message(self, recipient: Principal, content: str) -> int:
        """Send an internal message, returning its id."""

    # --- Agent approval ---

    @abstractmethod
    async def list_approvals(self) -> list[UserApprovalInfo]:
        """Approval status of every principal."""

    @abstractmethod
    async def is_caller_approved(self) -> bool:
        """Whether the caller is an approved agent."""

    @abstractmethod
    async def get_agent_panel_data(self) -> AgentPanelData:
        """Agents and approval statistics."""

    @abstractmethod
    async def request_approval(self) -> None:
        """Ask for agent approval as the caller."""

    @abstractmethod
    async def set_approval(self, user: Principal, status: ApprovalStatus) -> None:
        """Set approval status of a principal."""

    @abstractmethod
    async def change_agent_approval_status(
        self, agent_principal: Principal, status: ApprovalStatus
    ) -> None:
        """Change an agent's approval status from the agent panel."""

    # --- Aggregates ---

    @abstractmethod
    async def get_overview_metrics(self) -> OverviewMetrics:
        """Dashboard overview metrics."""

    @abstractmethod
    async def get_crm_dashboard_data(self) -> CrmDashboardData:
        """Every CRM collection in one call."""

    @abstractmethod
    async def get_customer_panels(self) -> CustomerPanels:
        """Customer queries grouped into rent/sales/interior panels."""

    # --- Customer portal ---

    @abstractmethod
    async def get_customer_profile_by_phone(
        self, phone_number: str
    ) -> CustomerProfile | None:
        """Portal profile registered under a phone number."""

    @abstractmethod
    async def get_customer_profile(self, profile_id: int) -> CustomerProfile | None:
        """Portal profile by id."""

    @abstractmethod
    async def get_customer_queries_by_phone_number(
        self, phone_number: str
    ) -> list[CustomerQueryResponse]:
        """Portal queries submitted under a phone number."""

    @abstractmethod
    async def get_customer_dashboard_data(
        self, phone_number: str
    ) -> CustomerDashboardData:
        """Portal dashboard bundle for a phone number."""

    @abstractmethod
    async def get_query_confirmation_message(self) -> str:
        """Text shown after a portal query is submitted."""

    @abstractmethod
    async def register_customer_profile(self, profile: CustomerProfile) -> int:
        """Register a portal profile, returning its id."""

    @abstractmethod
    async def submit_customer_query_response(
        self, response: CustomerQueryResponse
    ) -> int:
        """Submit a portal query, returning its id."""
