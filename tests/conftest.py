# tests/conftest.py
"""Shared test fixtures for all unit tests.

Provides an in-memory FakeActor implementing the full backend contract,
a CRM context wired to it, and sample records. No network I/O.
"""

from __future__ import annotations

import asyncio
import itertools

import pytest

from realtycrm.actor.base_actor import BaseActorClient
from realtycrm.actor.models import (
    AgentPanelData,
    ApprovalStatus,
    AttendanceRecord,
    CrmDashboardData,
    CsvAttendanceRecord,
    CsvReport,
    Customer,
    CustomerDashboardData,
    CustomerPanels,
    CustomerProfile,
    CustomerQuery,
    CustomerQueryResponse,
    FaceVerificationResult,
    FollowUp,
    Lead,
    LocationData,
    Message,
    MessageTemplate,
    OverviewMetrics,
    PaginatedAttendanceRecords,
    PaginatedCustomers,
    PaginatedLeads,
    UserApprovalInfo,
    UserProfile,
    UserRole,
    WhatsAppConfig,
    WhatsAppMessageLog,
    now_ns,
)
from realtycrm.config.settings import Settings
from realtycrm.crm.context import CrmContext
from realtycrm.identity.models import IdentityState
from realtycrm.identity.provider import StaticIdentityProvider
from realtycrm.notify.notifier import CollectingNotifier

AGENT = "agent-aaaa-1"
ADMIN = "admin-bbbb-2"


def _page(items: list, page_index: int | None, page_size: int | None):
    if page_index is None or page_size is None:
        return items, len(items), False
    start = (page_index - 1) * page_size
    chunk = items[start:start + page_size]
    return chunk, len(items), start + page_size < len(items)


class FakeActor(BaseActorClient):
    """In-memory backend.

    ``calls`` records every method name; ``failures[name]`` makes a method
    raise; ``gates[name]`` (an asyncio.Event) holds a method until set.
    """

    def __init__(self, principal: str | None = AGENT) -> None:
        self._principal = principal
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self._ids = itertools.count(1)
        self.closed = False

        self.profiles: dict[str, UserProfile] = {}
        self.roles: dict[str, UserRole] = {}
        self.customers: dict[int, Customer] = {}
        self.leads: dict[int, Lead] = {}
        self.customer_queries: dict[int, CustomerQuery] = {}
        self.follow_ups: dict[int, FollowUp] = {}
        self.templates: dict[int, MessageTemplate] = {}
        self.whatsapp_config: WhatsAppConfig | None = None
        self.whatsapp_logs: list[WhatsAppMessageLog] = []
        self.messages: list[Message] = []
        self.attendance: dict[int, AttendanceRecord] = {}
        self.approvals: dict[str, ApprovalStatus] = {}
        self.portal_profiles: dict[str, CustomerProfile] = {}
        self.portal_queries: list[CustomerQueryResponse] = []
        self.confirmation_message = "Thank you, we will call you back."
        self.overview = OverviewMetrics()
        self.panel = AgentPanelData()

    @property
    def principal(self) -> str | None:
        return self._principal

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        exc = self.failures.get(name)
        if exc is not None:
            raise exc

    def _new_id(self) -> int:
        return next(self._ids)

    async def aclose(self) -> None:
        self.closed = True

    # --- Users ---

    async def get_caller_user_profile(self):
        await self._enter("get_caller_user_profile")
        return self.profiles.get(self._principal)

    async def get_user_profile(self, user):
        await self._enter("get_user_profile")
        return self.profiles.get(user)

    async def is_caller_admin(self):
        await self._enter("is_caller_admin")
        return self.roles.get(self._principal) == UserRole.ADMIN

    async def get_caller_user_role(self):
        await self._enter("get_caller_user_role")
        return self.roles.get(self._principal, UserRole.GUEST)

    async def save_caller_user_profile(self, profile):
        await self._enter("save_caller_user_profile")
        self.profiles[self._principal] = profile

    async def assign_caller_user_role(self, user, role):
        await self._enter("assign_caller_user_role")
        self.roles[user] = role

    # --- Customers ---

    async def get_customer(self, customer_id):
        await self._enter("get_customer")
        return self.customers.get(customer_id)

    async def get_all_customers(self, page_index, page_size):
        await self._enter("get_all_customers")
        items, total, more = _page(list(self.customers.values()), page_index, page_size)
        return PaginatedCustomers(customers=items, total=total, has_next_page=more)

    async def add_customer(self, customer):
        await self._enter("add_customer")
        new_id = self._new_id()
        self.customers[new_id] = customer.model_copy(update={"id": new_id})
        return new_id

    async def update_customer(self, customer_id, customer):
        await self._enter("update_customer")
        self.customers[customer_id] = customer

    # --- Leads ---

    async def get_lead(self, lead_id):
        await self._enter("get_lead")
        return self.leads.get(lead_id)

    async def get_all_leads(self, page_index, page_size):
        await self._enter("get_all_leads")
        items, total, more = _page(list(self.leads.values()), page_index, page_size)
        return PaginatedLeads(leads=items, total=total, has_next_page=more)

    async def add_lead(self, lead):
        await self._enter("add_lead")
        new_id = self._new_id()
        self.leads[new_id] = lead.model_copy(update={"id": new_id})
        self.overview.total_leads += 1
        return new_id

    async def update_lead(self, lead_id, lead):
        await self._enter("update_lead")
        self.leads[lead_id] = lead

    async def assign_lead(self, lead_id, agent_id):
        await self._enter("assign_lead")
        self.leads[lead_id] = self.leads[lead_id].model_copy(
            update={"assigned_agent": agent_id}
        )

    async def delete_lead(self, lead_id):
        await self._enter("delete_lead")
        self.leads.pop(lead_id, None)

    # --- Customer queries ---

    async def get_customer_query(self, query_id):
        await self._enter("get_customer_query")
        return self.customer_queries.get(query_id)

    async def get_all_customer_queries(self):
        await self._enter("get_all_customer_queries")
        return list(self.customer_queries.values())

    async def get_agent_customer_queries(self, agent_id):
        await self._enter("get_agent_customer_queries")
        return [q for q in self.customer_queries.values() if q.assigned_agent == agent_id]

    async def add_customer_query(self, customer_query):
        await self._enter("add_customer_query")
        new_id = self._new_id()
        self.customer_queries[new_id] = customer_query.model_copy(update={"id": new_id})
        return new_id

    async def update_customer_query(self, query_id, customer_query):
        await self._enter("update_customer_query")
        self.customer_queries[query_id] = customer_query

    # --- Follow-ups ---

    async def get_follow_up(self, follow_up_id):
        await self._enter("get_follow_up")
        return self.follow_ups.get(follow_up_id)

    async def get_all_follow_ups(self):
        await self._enter("get_all_follow_ups")
        return list(self.follow_ups.values())

    async def add_follow_up(self, follow_up):
        await self._enter("add_follow_up")
        new_id = self._new_id()
        self.follow_ups[new_id] = follow_up.model_copy(update={"id": new_id})
        return new_id

    async def update_follow_up(self, follow_up_id, follow_up):
        await self._enter("update_follow_up")
        self.follow_ups[follow_up_id] = follow_up

    # --- Templates ---

    async def get_template(self, template_id):
        await self._enter("get_template")
        return self.templates.get(template_id)

    async def get_all_templates(self):
        await self._enter("get_all_templates")
        return list(self.templates.values())

    async def add_template(self, template):
        await self._enter("add_template")
        new_id = self._new_id()
        self.templates[new_id] = template.model_copy(update={"id": new_id})
        return new_id

    async def update_template(self, template_id, template):
        await self._enter("update_template")
        self.templates[template_id] = template

    async def delete_template(self, template_id):
        await self._enter("delete_template")
        self.templates.pop(template_id, None)

    # --- WhatsApp ---

    async def get_whatsapp_config(self):
        await self._enter("get_whatsapp_config")
        return self.whatsapp_config

    async def get_whatsapp_message_logs(self):
        await self._enter("get_whatsapp_message_logs")
        return list(self.whatsapp_logs)

    async def set_whatsapp_config(self, config):
        await self._enter("set_whatsapp_config")
        self.whatsapp_config = config

    async def log_whatsapp_message(self, log):
        await self._enter("log_whatsapp_message")
        new_id = self._new_id()
        self.whatsapp_logs.append(log.model_copy(update={"id": new_id}))
        return new_id

    # --- Attendance ---

    async def get_attendance_records(self, agent_id):
        await self._enter("get_attendance_records")
        return [r for r in self.attendance.values() if r.agent_id == agent_id]

    async def get_all_attendance_records(self, page_index, page_size):
        await self._enter("get_all_attendance_records")
        items, total, more = _page(list(self.attendance.values()), page_index, page_size)
        return PaginatedAttendanceRecords(records=items, total=total, has_next_page=more)

    async def get_attendance_records_csv_report(self, agent_id):
        await self._enter("get_attendance_records_csv_report")
        records = [r for r in self.attendance.values() if r.agent_id == agent_id]
        name = records[0].agent_name if records else ""
        return CsvReport(
            agent_name=name,
            agent_mobile="",
            attendance_records=[
                CsvAttendanceRecord(
                    agent_name=r.agent_name,
                    agent_mobile=r.agent_mobile,
                    attendance_date=r.check_in_time,
                    check_in_time=r.check_in_time,
                    check_out_time=r.check_out_time or 0,
                    face_verification=r.face_verification.message,
                    location=f"{r.location.latitude},{r.location.longitude}",
                )
                for r in records
            ],
        )

    async def record_attendance(self, record):
        await self._enter("record_attendance")
        if record.id == 0:
            record = record.model_copy(update={"id": self._new_id()})
        self.attendance[record.id] = record
        return record.id

    # --- Messaging ---

    async def get_messages(self, user):
        await self._enter("get_messages")
        return [m for m in self.messages if user in (m.recipient, m.sender)]

    async def send_message(self, recipient, content):
        await self._enter("send_message")
        new_id = self._new_id()
        self.messages.append(
            Message(id=new_id, content=content, recipient=recipient,
                    sender=self._principal, timestamp=now_ns())
        )
        return new_id

    # --- Approvals ---

    async def list_approvals(self):
        await self._enter("list_approvals")
        return [UserApprovalInfo(principal=p, status=s) for p, s in self.approvals.items()]

    async def is_caller_approved(self):
        await self._enter("is_caller_approved")
        return self.approvals.get(self._principal) == ApprovalStatus.APPROVED

    async def get_agent_panel_data(self):
        await self._enter("get_agent_panel_data")
        return self.panel

    async def request_approval(self):
        await self._enter("request_approval")
        self.approvals[self._principal] = ApprovalStatus.PENDING

    async def set_approval(self, user, status):
        await self._enter("set_approval")
        self.approvals[user] = status

    async def change_agent_approval_status(self, agent_principal, status):
        await self._enter("change_agent_approval_status")
        self.approvals[agent_principal] = status

    # --- Aggregates ---

    async def get_overview_metrics(self):
        await self._enter("get_overview_metrics")
        return self.overview.model_copy()

    async def get_crm_dashboard_data(self):
        await self._enter("get_crm_dashboard_data")
        return CrmDashboardData(
            leads=list(self.leads.values()),
            customers=list(self.customers.values()),
        )

    async def get_customer_panels(self):
        await self._enter("get_customer_panels")
        return CustomerPanels(rent_panel=list(self.customer_queries.values()))

    # --- Customer portal ---

    async def get_customer_profile_by_phone(self, phone_number):
        await self._enter("get_customer_profile_by_phone")
        return self.portal_profiles.get(phone_number)

    async def get_customer_profile(self, profile_id):
        await self._enter("get_customer_profile")
        profiles = list(self.portal_profiles.values())
        return profiles[profile_id - 1] if 0 < profile_id <= len(profiles) else None

    async def get_customer_queries_by_phone_number(self, phone_number):
        await self._enter("get_customer_queries_by_phone_number")
        return [q for q in self.portal_queries if q.phone_number == phone_number]

    async def get_customer_dashboard_data(self, phone_number):
        await self._enter("get_customer_dashboard_data")
        return CustomerDashboardData(
            queries=[q for q in self.portal_queries if q.phone_number == phone_number],
            confirmation_message=self.confirmation_message,
        )

    async def get_query_confirmation_message(self):
        await self._enter("get_query_confirmation_message")
        return self.confirmation_message

    async def register_customer_profile(self, profile):
        await self._enter("register_customer_profile")
        self.portal_profiles[profile.phone_number] = profile
        return len(self.portal_profiles)

    async def submit_customer_query_response(self, response):
        await self._enter("submit_customer_query_response")
        new_id = self._new_id()
        self.portal_queries.append(response.model_copy(update={"id": new_id}))
        return new_id


# === FIXTURES ===


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, principal=AGENT)


@pytest.fixture
def actor() -> FakeActor:
    return FakeActor(AGENT)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def identity() -> StaticIdentityProvider:
    """Provider already logged in as AGENT."""
    provider = StaticIdentityProvider(AGENT, auto_login=True)
    provider._transition(IdentityState.LOGGED_IN, AGENT)
    return provider


@pytest.fixture
def ctx(settings, actor, notifier, identity) -> CrmContext:
    return CrmContext.create(
        settings=settings, actor=actor, identity=identity, notifier=notifier
    )


@pytest.fixture
def agent_profile() -> UserProfile:
    return UserProfile(name="Ravi Kumar", role="agent", contact_number="9876543210")


@pytest.fixture
def face_result() -> FaceVerificationResult:
    return FaceVerificationResult(
        is_success=True,
        confidence_score=95,
        message="Face captured and verified successfully",
        face_data_hash="ab" * 32,
    )


@pytest.fixture
def location() -> LocationData:
    return LocationData(
        latitude=12.9716, longitude=77.5946, accuracy=10.0, location_timestamp=now_ns()
    )


def _make_record(
    record_id: int,
    agent_id: str = AGENT,
    check_in_time: int = 1_000,
    check_out_time: int | None = None,
) -> AttendanceRecord:
    return AttendanceRecord(
        id=record_id,
        agent_id=agent_id,
        agent_name="Ravi Kumar",
        agent_mobile="9876543210",
        check_in_time=check_in_time,
        check_out_time=check_out_time,
        face_verification=FaceVerificationResult(
            is_success=True, confidence_score=95, message="ok", face_data_hash="00"
        ),
        location=LocationData(latitude=1.0, longitude=2.0, location_timestamp=check_in_time),
    )


@pytest.fixture
def make_record():
    """Factory for attendance records of AGENT."""
    return _make_record


@pytest.fixture
def make_actor():
    """Factory for extra FakeActor instances."""
    return FakeActor
