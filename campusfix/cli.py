"""
CLI entry point for CampusFix.

Commands:
- serve: Start the API server
- init-db: Create the database tables
- seed: Load the demo users, tickets, classes and announcements
- route: Print the walking route between two waypoints
- issues: Show open issues per building
- validate-graph: Check the campus map for broken neighbor links
"""
import argparse
import logging
import os
import sys

from campusfix.config import settings


def serve(args):
    """Start the API server."""
    import uvicorn

    os.makedirs("data", exist_ok=True)

    print(f"Starting CampusFix API on http://{args.host}:{args.port}")
    print(f"API docs available at http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "campusfix.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


def init_database(args):
    """Create all tables."""
    from campusfix.models.database import init_db

    os.makedirs("data", exist_ok=True)
    init_db()
    print(f"Database ready: {settings.database_url}")


def seed(args):
    """Load the demo data."""
    from campusfix.scripts.seed_demo import seed_all

    os.makedirs("data", exist_ok=True)
    counts = seed_all()

    print(f"\n=== Seed Complete ===")
    for table, count in counts.items():
        print(f"{table.title():<15} {count}")


def route(args):
    """Print the route between two waypoints."""
    from campusfix.models.campus_graph import build_campus_graph

    graph = build_campus_graph(symmetric=not args.directed)
    path = graph.find_route(args.start, args.end)

    if not path:
        print(f"No route from {args.start} to {args.end}.")
        sys.exit(1)

    print(f"\n=== {args.start} -> {args.end} ({len(path) - 1} hops, "
          f"{graph.route_distance(path):.1f} units) ===\n")
    for i, step in enumerate(graph.describe_route(path), 1):
        if args.verbose:
            print(f"{i:>2}. {step.description}  [{step.point_id}]")
        else:
            print(f"{i:>2}. {step.description}")


def issues(args):
    """Show open issues per building."""
    from campusfix.models.campus_graph import build_campus_graph
    from campusfix.models.database import init_db
    from campusfix.services.ticket_service import create_service

    os.makedirs("data", exist_ok=True)
    init_db()
    graph = build_campus_graph()
    summary = create_service().building_issue_summary()

    if not summary:
        print("No open issues.")
        return

    print(f"\n=== Open Issues by Building ===\n")
    for building_id, s in sorted(summary.items(), key=lambda kv: -kv[1].count):
        building = graph.buildings.get(building_id)
        name = building.name if building else building_id
        print(f"{name:<28} {s.count:>3} open   worst: {s.max_priority.value}")


def validate_graph(args):
    """Check the campus map for dangling or one-way links."""
    from campusfix.models.campus_graph import build_campus_graph

    graph = build_campus_graph(symmetric=not args.directed)
    problems = graph.validate()

    print(f"Waypoints: {len(graph.waypoints)}, buildings: {len(graph.buildings)}")
    if not problems:
        print("No problems found.")
        return

    print(f"\n=== {len(problems)} problem(s) ===")
    for problem in problems:
        print(f"  - {problem}")
    if any(p.kind == "dangling" for p in problems):
        sys.exit(1)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="CampusFix - campus maintenance tickets and navigation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=settings.api_host, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=serve)

    # Database commands
    init_parser = subparsers.add_parser("init-db", help="Create the database tables")
    init_parser.set_defaults(func=init_database)

    seed_parser = subparsers.add_parser("seed", help="Load the demo data")
    seed_parser.set_defaults(func=seed)

    # Map commands
    route_parser = subparsers.add_parser("route", help="Find a walking route between waypoints")
    route_parser.add_argument("start", help="Start waypoint ID (e.g., node-admin)")
    route_parser.add_argument("end", help="End waypoint ID (e.g., node-cafe)")
    route_parser.add_argument("--directed", action="store_true",
                              help="Use neighbor lists as stored, without mirroring")
    route_parser.add_argument("-v", "--verbose", action="store_true", help="Show waypoint IDs")
    route_parser.set_defaults(func=route)

    issues_parser = subparsers.add_parser("issues", help="Show open issues per building")
    issues_parser.set_defaults(func=issues)

    validate_parser = subparsers.add_parser("validate-graph", help="Check the campus map")
    validate_parser.add_argument("--directed", action="store_true",
                                 help="Check neighbor lists as stored")
    validate_parser.set_defaults(func=validate_graph)

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    args.func(args)


if __name__ == "__main__":
    main()
