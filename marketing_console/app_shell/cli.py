import argparse
import logging
import sys
from pathlib import Path

from marketing_console.adapters.clock import FrozenClock, SystemClock
from marketing_console.adapters.memory_store import InMemoryEntityStore, load_snapshot
from marketing_console.components.analytics import (
    DashboardOutput,
    DashboardQuery,
    EventScope,
    config_from_rules,
    run_dashboard,
)
from marketing_console.components.export import (
    CsvExport,
    export_attribution,
    export_decisions,
    export_profile_events,
    export_profiles,
    export_segment_members,
    export_top_messages,
    export_top_pages,
    export_top_products,
)
from marketing_console.components.filtering import (
    DecisionFilter,
    MemberFilter,
    ProfileFilter,
    filter_decisions,
    filter_profiles,
    filter_segment_members,
    lifetime_values,
)
from marketing_console.core.ports.store import EntityNotFoundError
from marketing_console.core.ports.time import TimePort
from marketing_console.domain.entities import (
    Agent,
    AgentDecision,
    ChannelSubscription,
    Event,
    Message,
    Profile,
    Segment,
    SegmentProfile,
)
from marketing_console.domain.timeutil import parse_timestamp
from marketing_console.rules.loader import load_rules
from marketing_console.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"

EXPORT_KINDS = (
    "top-pages",
    "top-messages",
    "top-products",
    "attribution",
    "decisions",
    "segment",
    "profiles",
    "events",
)


class Context:
    """Rules, clock and store for one CLI run."""

    def __init__(self, rules: Rules, clock: TimePort, store: InMemoryEntityStore) -> None:
        self.rules = rules
        self.clock = clock
        self.store = store


def get_context(args: argparse.Namespace) -> Context:
    rules_path = Path(args.rules)
    if rules_path.exists():
        rules = load_rules(rules_path)
    else:
        logger.warning(f"Rules file {rules_path} not found, using defaults.")
        rules = Rules()

    tz_name = args.tz or rules.analytics.timezone
    clock: TimePort
    try:
        if args.now:
            frozen = parse_timestamp(args.now)
            if frozen is None:
                logger.error(f"Invalid --now timestamp: {args.now}")
                sys.exit(2)
            clock = FrozenClock(frozen, tz_name)
        else:
            clock = SystemClock(tz_name)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(2)

    try:
        store = load_snapshot(Path(args.snapshot), time_port=clock)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
    return Context(rules, clock, store)


def build_query(args: argparse.Namespace) -> DashboardQuery:
    return DashboardQuery(
        preset=args.preset,
        granularity=args.granularity,
        custom_start=args.start,
        custom_end=args.end,
        scope=EventScope(
            channel=args.channel,
            agent_id=args.agent_id,
            message_id=args.message_id,
            message_category_id=args.category_id,
        ),
        attribution_dimension=args.dimension,
    )


def compute_dashboard(ctx: Context, args: argparse.Namespace) -> DashboardOutput:
    match = {"account_id": args.account} if args.account else None
    return run_dashboard(
        build_query(args),
        ctx.store.select_matches(Event, match),
        now=ctx.clock.now_utc(),
        tz=ctx.clock.timezone,
        agents=ctx.store.select_matches(Agent, match),
        messages=ctx.store.select_matches(Message, match),
        config=config_from_rules(ctx.rules),
    )


def handle_dashboard(ctx: Context, args: argparse.Namespace) -> None:
    output = compute_dashboard(ctx, args)
    print(f"Range: {output.range.start.isoformat()} .. {output.range.end.isoformat()}")
    print(
        f"Previous: {output.previous_range.start.isoformat()} .. "
        f"{output.previous_range.end.isoformat()}"
    )
    for vertical, rows in output.kpis.items():
        print(f"[{vertical}]")
        for row in rows:
            shown = row.value_str if row.value_str is not None else row.value
            delta = f"  ({row.delta:+.1%})" if row.delta else ""
            print(f"  {row.label}: {shown}{delta}")
    print(f"Deliverability: {output.summary.deliverability:.1%}")
    if output.attribution:
        print(f"[attribution by {args.dimension}]")
        for r in output.attribution:
            print(
                f"  {r.name}: revenue={r.revenue:.2f} orders={r.orders} "
                f"sends={r.sends} aov={r.aov:.2f} roi={r.roi:.2f}"
            )


def _require(value: str | None, flag: str, kind: str) -> str:
    if not value:
        logger.error(f"Export '{kind}' requires {flag}.")
        sys.exit(2)
    return value


def build_export(ctx: Context, args: argparse.Namespace) -> CsvExport:
    kind = args.kind
    store = ctx.store
    tz = ctx.clock.timezone
    now = ctx.clock.now_utc()

    if kind in ("top-pages", "top-messages", "top-products", "attribution"):
        output = compute_dashboard(ctx, args)
        if kind == "top-pages":
            return export_top_pages(output.top_pages)
        if kind == "top-messages":
            return export_top_messages(output.top_messages)
        if kind == "top-products":
            return export_top_products(output.top_products)
        return export_attribution(output.attribution, args.dimension)

    if kind == "decisions":
        agent = store.get(Agent, _require(args.agent_id, "--agent-id", kind))
        decisions = filter_decisions(
            store.select_matches(AgentDecision, {"agent_id": agent.id}),
            DecisionFilter(date_range=args.decision_range),
            now=now,
            messages=store.select_matches(Message, {"category_id": agent.message_category_id}),
            tz=tz,
        )
        return export_decisions(decisions, agent.name or agent.id)

    if kind == "segment":
        segment = store.get(Segment, _require(args.segment_id, "--segment-id", kind))
        memberships = store.select_matches(SegmentProfile, {"segment_id": segment.id})
        ids = {m.profile_id for m in memberships}
        profiles = [p for p in store.select_matches(Profile) if p.id in ids]
        subs = [s for s in store.select_matches(ChannelSubscription) if s.profile_id in ids]
        state = MemberFilter(timeframe=args.timeframe)
        events = [e for e in store.select_matches(Event) if e.profile_id in ids]
        rows = filter_segment_members(
            profiles,
            memberships,
            subs,
            lifetime_values(events, state.timeframe, now, tz),
            state,
            tz,
        )
        return export_segment_members(rows, segment.name)

    if kind == "profiles":
        profiles = filter_profiles(
            store.select_matches(Profile, order_by="created_at", descending=True),
            ProfileFilter(search=args.search or ""),
        )
        return export_profiles(profiles)

    profile_id = _require(args.profile_id, "--profile-id", kind)
    events = store.select_matches(
        Event, {"profile_id": profile_id}, order_by="occurred_at", descending=True
    )
    return export_profile_events(events, profile_id)


def handle_export(ctx: Context, args: argparse.Namespace) -> None:
    try:
        export = build_export(ctx, args)
    except EntityNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / export.filename
    target.write_bytes(export.encode())
    print(f"Wrote {export.row_count} rows to {target}")


def _add_dashboard_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--preset", default="30d", help="7d, 30d, 90d or custom")
    parser.add_argument("--granularity", default="day", choices=["hour", "day", "week"])
    parser.add_argument("--start", help="Custom range start (ISO date)")
    parser.add_argument("--end", help="Custom range end (ISO date)")
    parser.add_argument("--channel", choices=["email", "sms", "push"])
    parser.add_argument("--agent-id")
    parser.add_argument("--message-id")
    parser.add_argument("--category-id")
    parser.add_argument("--dimension", default="agent", choices=["agent", "message"])
    parser.add_argument("--account", help="Only read records of this account")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Marketing Console CLI")
    parser.add_argument("--snapshot", required=True, help="JSON snapshot of the store")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    parser.add_argument("--tz", help="Timezone override (IANA name)")
    parser.add_argument("--now", help="Fixed current time (ISO), for reproducible output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # dashboard
    dashboard_parser = subparsers.add_parser("dashboard", help="Print KPI rows")
    _add_dashboard_args(dashboard_parser)

    # export
    export_parser = subparsers.add_parser("export", help="Write a CSV export")
    export_parser.add_argument("kind", choices=EXPORT_KINDS)
    export_parser.add_argument("--out", default=".", help="Output directory")
    export_parser.add_argument("--segment-id")
    export_parser.add_argument("--profile-id")
    export_parser.add_argument("--search")
    export_parser.add_argument(
        "--decision-range", default="all", choices=["24h", "7d", "30d", "all"]
    )
    export_parser.add_argument("--timeframe", default="all", choices=["30d", "90d", "all"])
    _add_dashboard_args(export_parser)

    args = parser.parse_args(argv)

    ctx = get_context(args)

    if args.command == "dashboard":
        handle_dashboard(ctx, args)
    elif args.command == "export":
        handle_export(ctx, args)


if __name__ == "__main__":
    main()
