# src/actor/models.py
"""Wire data model of the CRM backend actor.

Attributes are snake_case in Python and camelCase on the wire. Timestamps
(``Time``) are integers in nanoseconds since the Unix epoch. Principals are
opaque strings.
"""

from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Principal = str
Time = int


def now_ns() -> Time:
    """Current wall-clock time in nanoseconds since epoch."""
    return time.time_ns()


class WireModel(BaseModel):
    """Base for every record crossing the actor boundary."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_wire(self) -> dict:
        """Serialize with camelCase keys and JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json")


# === Enumerations ===


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST = "lost"


class QueryStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "inProgress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TemplateCategory(str, Enum):
    SUPPORT = "support"
    SALES = "sales"
    FOLLOW_UP = "followUp"
    GENERAL = "general"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


# === Users ===


class UserProfile(WireModel):
    name: str
    role: str
    email: str | None = None
    contact_number: str | None = None


# === Customers / leads ===


class ServiceRecord(WireModel):
    date: Time
    description: str
    cost: int | None = None


class Customer(WireModel):
    id: int = 0
    name: str
    created_at: Time = 0
    email: str | None = None
    address: str | None = None
    notes: str | None = None
    phone: str | None = None
    service_history: list[ServiceRecord] = Field(default_factory=list)


class Lead(WireModel):
    id: int = 0
    name: str
    status: LeadStatus = LeadStatus.NEW
    assigned_agent: Principal | None = None
    created_at: Time = 0
    email: str | None = None
    phone: str | None = None


class CustomerQuery(WireModel):
    id: int = 0
    customer_name: str
    status: QueryStatus = QueryStatus.OPEN
    flat_type: str
    rent_range: int = 0
    assigned_agent: Principal | None = None
    created_at: Time = 0
    contact_phone: str


class FollowUp(WireModel):
    id: int = 0
    customer_id: int
    due_date: Time
    completed: bool = False
    notes: str | None = None


class MessageTemplate(WireModel):
    id: int = 0
    content: str
    category: TemplateCategory = TemplateCategory.GENERAL
    created_at: Time = 0


# === WhatsApp / messaging ===


class WhatsAppConfig(WireModel):
    api_key: str
    business_number: str
    is_active: bool = False


class WhatsAppMessageLog(WireModel):
    id: int = 0
    message_content: str
    sent_status: bool = False
    lead_id: int | None = None
    timestamp: Time = 0


class Message(WireModel):
    id: int = 0
    content: str
    recipient: Principal
    sender: Principal
    timestamp: Time = 0


# === Attendance ===


class FaceVerificationResult(WireModel):
    is_success: bool
    confidence_score: int
    message: str
    face_data_hash: str


class LocationData(WireModel):
    latitude: float
    longitude: float
    accuracy: float | None = None
    location_timestamp: Time


class AttendanceRecord(WireModel):
    id: int = 0
    agent_id: Principal
    agent_name: str
    agent_mobile: str = ""
    check_in_time: Time
    check_out_time: Time | None = None
    face_verification: FaceVerificationResult
    location: LocationData
    is_valid: bool = True

    @property
    def is_open(self) -> bool:
        """True while the record has no check-out time."""
        return self.check_out_time is None


class CsvAttendanceRecord(WireModel):
    agent_name: str
    agent_mobile: str
    attendance_date: int
    check_in_time: int
    check_out_time: int
    face_verification: str
    location: str


class CsvReport(WireModel):
    agent_name: str
    agent_mobile: str
    attendance_records: list[CsvAttendanceRecord] = Field(default_factory=list)


# === Agent approval ===


class AgentInfo(WireModel):
    principal: Principal
    name: str
    approval_status: str
    contact_number: str = ""


class AgentStats(WireModel):
    total_agents: int = 0
    pending_agents: int = 0
    approved_agents: int = 0
    rejected_agents: int = 0
    approval_rate: float = 0.0
    rejection_rate: float = 0.0


class AgentPanelData(WireModel):
    agents: list[AgentInfo] = Field(default_factory=list)
    agent_stats: AgentStats = Field(default_factory=AgentStats)
    recent_changes: list[AgentInfo] = Field(default_factory=list)


class UserApprovalInfo(WireModel):
    principal: Principal
    status: ApprovalStatus


# === Aggregates ===


class CustomerQueryStats(WireModel):
    total_queries: int = 0
    open_queries: int = 0
    in_progress_queries: int = 0
    resolved_queries: int = 0
    closed_queries: int = 0


class PanelQueryStats(WireModel):
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0


class AgentCountPerStatus(WireModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class AgentApprovalMetrics(WireModel):
    total_agents: int = 0
    pending_agents: int = 0
    approved_agents: int = 0
    rejected_agents: int = 0
    agent_count_per_status: AgentCountPerStatus = Field(
        default_factory=AgentCountPerStatus
    )
    recent_agent_approvals: list[AgentInfo] = Field(default_factory=list)


class OverviewMetrics(WireModel):
    total_leads: int = 0
    total_customers: int = 0
    conversion_rate: float = 0.0
    pending_follow_ups: int = 0
    today_check_ins: int = 0
    current_day_check_ins: int = 0
    valid_check_ins: int = 0
    recent_leads: list[Lead] = Field(default_factory=list)
    recent_customers: list[Customer] = Field(default_factory=list)
    recent_follow_ups: list[FollowUp] = Field(default_factory=list)
    customer_query_stats: CustomerQueryStats = Field(default_factory=CustomerQueryStats)
    rent_queries: PanelQueryStats = Field(default_factory=PanelQueryStats)
    sales_queries: PanelQueryStats = Field(default_factory=PanelQueryStats)
    interior_queries: PanelQueryStats = Field(default_factory=PanelQueryStats)
    agent_approval_metrics: AgentApprovalMetrics = Field(
        default_factory=AgentApprovalMetrics
    )


class CustomerPanels(WireModel):
    rent_panel: list[CustomerQuery] = Field(default_factory=list)
    sales_panel: list[CustomerQuery] = Field(default_factory=list)
    interior_panel: list[CustomerQuery] = Field(default_factory=list)


# === Customer portal ===


class CustomerProfile(WireModel):
    name: str
    phone_number: str
    email: str | None = None


class CustomerQueryResponse(WireModel):
    id: int = 0
    name: str
    phone_number: str
    query_type: str
    message: str
    email: str | None = None
    submitted_at: Time = 0


class CustomerDashboardData(WireModel):
    queries: list[CustomerQueryResponse] = Field(default_factory=list)
    confirmation_message: str = ""
    profiles: list[CustomerProfile] = Field(default_factory=list)


class CrmDashboardData(WireModel):
    leads: list[Lead] = Field(default_factory=list)
    customers: list[Customer] = Field(default_factory=list)
    follow_ups: list[FollowUp] = Field(default_factory=list)
    templates: list[MessageTemplate] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    customer_queries: list[CustomerQuery] = Field(default_factory=list)
    customer_profiles: list[CustomerProfile] = Field(default_factory=list)
    customer_query_responses: list[CustomerQueryResponse] = Field(default_factory=list)


# === Pagination envelopes ===


class PaginatedCustomers(WireModel):
    customers: list[Customer] = Field(default_factory=list)
    total: int = 0
    has_next_page: bool = False

    @classmethod
    def empty(cls) -> PaginatedCustomers:
        return cls()


class PaginatedLeads(WireModel):
    leads: list[Lead] = Field(default_factory=list)
    total: int = 0
    has_next_page: bool = False

    @classmethod
    def empty(cls) -> PaginatedLeads:
        return cls()


class PaginatedAttendanceRecords(WireModel):
    records: list[AttendanceRecord] = Field(default_factory=list)
    total: int = 0
    has_next_page: bool = False

    @classmethod
    def empty(cls) -> PaginatedAttendanceRecords:
        return cls()
