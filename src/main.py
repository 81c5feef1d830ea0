# src/main.py
"""CLI entry point: leads, customers, metrics, attendance, portal and
WhatsApp link commands.

Usage:
    realtycrm leads list [--page N --size N] [--status STATUS]
    realtycrm leads add <name> [--email E] [--phone P]
    realtycrm customers list [--page N --size N]
    realtycrm metrics
    realtycrm attendance check-in --photo FILE --lat LAT --lon LON [--accuracy M]
    realtycrm attendance check-out
    realtycrm attendance records
    realtycrm portal login <phone> | logout | whoami
    realtycrm whatsapp link <phone> <text>
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from pydantic import ValidationError

from realtycrm.config.settings import ConfigurationError, Settings, load_settings
from realtycrm.logging.logger import setup_logging
from realtycrm.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        overrides = {"_env_file": args.env_file} if args.env_file else {}
        settings = load_settings(**overrides)
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Command failed: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="realtycrm",
        description=f"realtycrm v{__version__}: real-estate CRM client",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--env-file", type=Path, default=None,
        help="Settings file to load instead of ./.env",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- leads ---
    p_leads = subparsers.add_parser("leads", help="List or add leads")
    leads_sub = p_leads.add_subparsers(dest="leads_command")

    p_leads_list = leads_sub.add_parser("list", help="List leads")
    _add_paging(p_leads_list)
    p_leads_list.add_argument(
        "--status", default=None,
        choices=["new", "contacted", "qualified", "converted", "lost"],
        help="Only leads with this status",
    )
    p_leads_list.set_defaults(func=_cmd_leads_list)

    p_leads_add = leads_sub.add_parser("add", help="Create a lead")
    p_leads_add.add_argument("name", help="Lead name")
    p_leads_add.add_argument("--email", default=None)
    p_leads_add.add_argument("--phone", default=None)
    p_leads_add.set_defaults(func=_cmd_leads_add)

    # --- customers ---
    p_customers = subparsers.add_parser("customers", help="List customers")
    customers_sub = p_customers.add_subparsers(dest="customers_command")
    p_customers_list = customers_sub.add_parser("list", help="List customers")
    _add_paging(p_customers_list)
    p_customers_list.set_defaults(func=_cmd_customers_list)

    # --- metrics ---
    p_metrics = subparsers.add_parser("metrics", help="Show overview metrics")
    p_metrics.set_defaults(func=_cmd_metrics)

    # --- attendance ---
    p_att = subparsers.add_parser("attendance", help="Check in, check out, records")
    att_sub = p_att.add_subparsers(dest="attendance_command")

    p_check_in = att_sub.add_parser("check-in", help="Record a check-in")
    p_check_in.add_argument("--photo", type=Path, required=True, help="Face photo file")
    p_check_in.add_argument("--lat", type=float, required=True, help="Latitude")
    p_check_in.add_argument("--lon", type=float, required=True, help="Longitude")
    p_check_in.add_argument("--accuracy", type=float, default=None, help="Accuracy (m)")
    p_check_in.set_defaults(func=_cmd_check_in)

    p_check_out = att_sub.add_parser("check-out", help="Close the open check-in")
    p_check_out.set_defaults(func=_cmd_check_out)

    p_records = att_sub.add_parser("records", help="List your attendance records")
    p_records.set_defaults(func=_cmd_attendance_records)

    # --- portal ---
    p_portal = subparsers.add_parser("portal", help="Customer portal session")
    portal_sub = p_portal.add_subparsers(dest="portal_command")

    p_login = portal_sub.add_parser("login", help="Log in with a phone number")
    p_login.add_argument("phone", help="10-digit phone number")
    p_login.set_defaults(func=_cmd_portal_login)

    p_logout = portal_sub.add_parser("logout", help="End the portal session")
    p_logout.set_defaults(func=_cmd_portal_logout)

    p_whoami = portal_sub.add_parser("whoami", help="Show the portal session")
    p_whoami.set_defaults(func=_cmd_portal_whoami)

    # --- whatsapp ---
    p_wa = subparsers.add_parser("whatsapp", help="WhatsApp helpers")
    wa_sub = p_wa.add_subparsers(dest="whatsapp_command")
    p_link = wa_sub.add_parser("link", help="Build a click-to-chat link")
    p_link.add_argument("phone", help="Recipient phone number")
    p_link.add_argument("text", help="Prefilled message")
    p_link.set_defaults(func=_cmd_whatsapp_link)

    return parser


def _add_paging(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page", type=int, default=None, help="1-based page index")
    parser.add_argument("--size", type=int, default=20, help="Page size (default: 20)")


@asynccontextmanager
async def _session(settings: Settings) -> AsyncIterator:
    """CRM context for one command; prints collected notifications on exit."""
    from realtycrm.actor.client_factory import create_actor_client
    from realtycrm.crm.context import CrmContext
    from realtycrm.identity.provider import StaticIdentityProvider
    from realtycrm.notify.notifier import CollectingNotifier

    notifier = CollectingNotifier()
    identity = StaticIdentityProvider(settings.principal or None, auto_login=True)
    await identity.initialize()
    ctx = CrmContext.create(
        settings=settings,
        actor=create_actor_client(settings),
        identity=identity,
        notifier=notifier,
    )
    try:
        yield ctx
    finally:
        for level, message in notifier.drain():
            print(f"[{level}] {message}", file=sys.stderr)
        await ctx.aclose()


async def _cmd_leads_list(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.actor.models import LeadStatus
    from realtycrm.crm.leads import LeadOperations

    async with _session(settings) as ctx:
        leads_ops = LeadOperations(ctx)
        if args.status:
            leads = await leads_ops.get_leads_by_status(LeadStatus(args.status))
        elif args.page:
            page = await leads_ops.get_all_leads_paginated(args.page, args.size)
            leads = page.leads
            print(f"Page {args.page}: {len(leads)} of {page.total} leads"
                  f"{' (more)' if page.has_next_page else ''}")
        else:
            leads = await leads_ops.get_all_leads()

    for lead in leads:
        agent = lead.assigned_agent or "-"
        print(f"  #{lead.id:<5} {lead.name:<30} {lead.status.value:<10} {agent}")
    return 0


async def _cmd_leads_add(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.actor.models import Lead, now_ns
    from realtycrm.crm.leads import LeadOperations

    lead = Lead(name=args.name, email=args.email, phone=args.phone, created_at=now_ns())
    async with _session(settings) as ctx:
        lead_id = await LeadOperations(ctx).create_lead(lead)
    print(f"Lead #{lead_id} created")
    return 0


async def _cmd_customers_list(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.crm.customers import CustomerOperations

    async with _session(settings) as ctx:
        ops = CustomerOperations(ctx)
        if args.page:
            page = await ops.get_all_customers_paginated(args.page, args.size)
            customers = page.customers
            print(f"Page {args.page}: {len(customers)} of {page.total} customers")
        else:
            customers = await ops.get_all_customers()

    for customer in customers:
        print(f"  #{customer.id:<5} {customer.name:<30} {customer.phone or '-'}")
    return 0


async def _cmd_metrics(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.crm.aggregates import AggregateOperations

    async with _session(settings) as ctx:
        metrics = await AggregateOperations(ctx).get_overview_metrics()
    if metrics is None:
        print("No metrics available")
        return 1

    print("\nOverview:")
    print(f"  Leads:              {metrics.total_leads}")
    print(f"  Customers:          {metrics.total_customers}")
    print(f"  Conversion rate:    {metrics.conversion_rate:.1f}%")
    print(f"  Pending follow-ups: {metrics.pending_follow_ups}")
    print(f"  Check-ins today:    {metrics.today_check_ins}")
    print(f"  Open queries:       {metrics.customer_query_stats.open_queries}")
    return 0


async def _cmd_check_in(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.attendance.devices import FixedLocator, StaticPhotoCamera
    from realtycrm.attendance.flow import CheckInFlow
    from realtycrm.attendance.models import CameraConfig, FlowState
    from realtycrm.crm.attendance import AttendanceOperations

    camera = StaticPhotoCamera(
        args.photo,
        CameraConfig(width=settings.camera_width, height=settings.camera_height),
    )
    locator = FixedLocator(args.lat, args.lon, args.accuracy)
    async with _session(settings) as ctx:
        async with CheckInFlow(AttendanceOperations(ctx), camera, locator) as flow:
            if await flow.start() != FlowState.READY:
                print(f"Check-in not possible: {flow.error}", file=sys.stderr)
                return 1
            record_id = await flow.capture_and_submit()
    print(f"Checked in (record #{record_id})")
    return 0


async def _cmd_check_out(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.crm.attendance import AttendanceOperations

    async with _session(settings) as ctx:
        record_id = await AttendanceOperations(ctx).mark_check_out()
    print(f"Checked out (record #{record_id})")
    return 0


async def _cmd_attendance_records(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.crm.attendance import AttendanceOperations

    async with _session(settings) as ctx:
        records = await AttendanceOperations(ctx).get_caller_attendance_records()

    for record in records:
        out = record.check_out_time if record.check_out_time is not None else "open"
        print(f"  #{record.id:<5} in={record.check_in_time} out={out}")
    return 0


def _customer_auth(settings: Settings, client=None):
    from realtycrm.portal.auth import CustomerAuth
    from realtycrm.portal.storage import JsonFileStorage

    return CustomerAuth(
        JsonFileStorage(settings.customer_session_file),
        client,
        key=settings.customer_session_key,
    )


async def _cmd_portal_login(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.portal.queries import PortalOperations

    async with _session(settings) as ctx:
        auth = _customer_auth(settings, ctx.client)
        await auth.load()
        profile = await PortalOperations(ctx, auth).customer_login(args.phone)
    if auth.error:
        print(auth.error, file=sys.stderr)
        return 1
    print(f"Logged in as {profile.name} ({profile.phone_number})")
    return 0


async def _cmd_portal_logout(args: argparse.Namespace, settings: Settings) -> int:
    auth = _customer_auth(settings)
    await auth.load()
    if not await auth.logout():
        print(auth.error, file=sys.stderr)
        return 1
    print("Logged out")
    return 0


async def _cmd_portal_whoami(args: argparse.Namespace, settings: Settings) -> int:
    auth = _customer_auth(settings)
    phone = await auth.load()
    if auth.error:
        print(auth.error, file=sys.stderr)
        return 1
    print(phone if phone else "Not logged in")
    return 0


async def _cmd_whatsapp_link(args: argparse.Namespace, settings: Settings) -> int:
    from realtycrm.crm.whatsapp import build_whatsapp_link

    print(build_whatsapp_link(args.phone, args.text))
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
