#!/usr/bin/env python3
"""
CLI tool for interacting with the taskflow service.

Usage:
    python -m taskflow_svc.cli --user-id admin --role admin list --overdue-only
    python -m taskflow_svc.cli --user-id AGT-101 show TR-0001
    python -m taskflow_svc.cli --user-id admin --role admin create "Title" "Description" --agent AGT-101
    python -m taskflow_svc.cli --user-id AGT-101 update TR-0001 --status "In Progress"
    python -m taskflow_svc.cli --user-id AGT-101 comment TR-0001 "Working on it"
    python -m taskflow_svc.cli --user-id admin --role admin delete TR-0001
    python -m taskflow_svc.cli --user-id AGT-101 stats
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx
from colorama import Fore, Style, init as colorama_init

colorama_init()


STATUS_COLORS = {
    "Open": Fore.BLUE,
    "In Progress": Fore.YELLOW,
    "Blocked": Fore.RED,
    "Done": Fore.GREEN,
}

PRIORITY_COLORS = {
    "Low": Style.DIM,
    "Medium": Fore.CYAN,
    "High": Fore.YELLOW,
    "Critical": Fore.RED + Style.BRIGHT,
}


def colorize(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}"


def print_json(data: Any, indent: int = 2) -> None:
    output = json.dumps(data, indent=indent, default=str)
    print(output)


def print_error(response: httpx.Response) -> int:
    """Print an error response and return the exit code."""
    print(colorize(f"Error: {response.status_code}", Fore.RED), file=sys.stderr)
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = response.text
    if isinstance(detail, dict):
        print(f"{detail.get('error')}: {detail.get('message')}", file=sys.stderr)
    elif detail:
        print(detail, file=sys.stderr)
    return 1


def format_request_line(req: dict) -> str:
    status = req.get("status", "")
    priority = req.get("priority", "")
    overdue = colorize(" OVERDUE", Fore.RED) if req.get("is_overdue") else ""
    agent = req.get("assigned_agent") or colorize("unassigned", Style.DIM)
    return (
        f"{colorize(req['id'], Style.BRIGHT):<20} "
        f"{colorize(status, STATUS_COLORS.get(status, '')):<22} "
        f"{colorize(priority, PRIORITY_COLORS.get(priority, '')):<20} "
        f"{agent:<12} {req.get('title', '')}{overdue}"
    )


def print_request(req: dict) -> None:
    """Pretty print a full request with its comment log."""
    print(colorize(f"\n{req['id']}", Style.BRIGHT), req.get("title", ""))
    print(colorize("Status:", Style.BRIGHT), colorize(req["status"], STATUS_COLORS.get(req["status"], "")))
    print(colorize("Priority:", Style.BRIGHT), colorize(req["priority"], PRIORITY_COLORS.get(req["priority"], "")))
    print(colorize("Assigned:", Style.BRIGHT), req.get("assigned_agent") or colorize("(unassigned)", Style.DIM))
    print(colorize("Created by:", Style.BRIGHT), req.get("created_by", ""))
    print(colorize("Due:", Style.BRIGHT), req.get("due_date"),
          colorize("(overdue)", Fore.RED) if req.get("is_overdue") else "")
    if req.get("tags"):
        print(colorize("Tags:", Style.BRIGHT), ", ".join(req["tags"]))
    print(colorize("\nDescription:", Style.BRIGHT))
    print(f"  {req.get('description', '')}")

    print(colorize("\nComments:", Style.BRIGHT))
    comments = req.get("comments", [])
    for c in comments:
        print(f"  {colorize(c['timestamp'], Style.DIM)} [{c['type']}] "
              f"{colorize(c['author'], Fore.CYAN)}: {c['content']}")
    if not comments:
        print(colorize("  (none)", Style.DIM))


async def cmd_list(args):
    """List requests."""
    params: dict[str, Any] = {"sort_by": args.sort_by}
    if args.search:
        params["search"] = args.search
    if args.status:
        params["status"] = args.status
    if args.priority:
        params["priority"] = args.priority
    if args.overdue_only:
        params["overdue_only"] = "true"
    if args.mine:
        params["mine"] = "true"

    async with httpx.AsyncClient() as client:
        response = await client.get(f"{args.base_url}/requests", params=params, headers=_get_headers(args))
        if response.status_code != 200:
            return print_error(response)
        data = response.json()

    if args.json:
        print_json(data)
        return 0

    for req in data.get("requests", []):
        print(format_request_line(req))
    if not data.get("requests"):
        print(colorize("(no requests match)", Style.DIM))
    print(colorize(f"\n{data.get('total', 0)} request(s)", Style.DIM))
    return 0


async def cmd_show(args):
    """Show a single request."""
    async with httpx.AsyncClient() as client:
        response = await client.get(f"{args.base_url}/requests/{args.request_id}", headers=_get_headers(args))
        if response.status_code != 200:
            return print_error(response)
        data = response.json()

    if args.json:
        print_json(data)
    else:
        print_request(data)
    return 0


async def cmd_create(args):
    """Create a request."""
    body: dict[str, Any] = {"title": args.title, "description": args.description}
    if args.priority:
        body["priority"] = args.priority
    if args.due:
        body["due_date"] = args.due
    if args.agent:
        body["assigned_agent"] = args.agent
    if args.tag:
        body["tags"] = args.tag

    async with httpx.AsyncClient() as client:
        response = await client.post(f"{args.base_url}/requests", json=body, headers=_get_headers(args))
        if response.status_code != 201:
            return print_error(response)
        data = response.json()

    print(colorize("Created", Fore.GREEN), format_request_line(data))
    return 0


async def cmd_update(args):
    """Update fields on a request."""
    body: dict[str, Any] = {}
    if args.title is not None:
        body["title"] = args.title
    if args.description is not None:
        body["description"] = args.description
    if args.status is not None:
        body["status"] = args.status
    if args.priority is not None:
        body["priority"] = args.priority
    if args.due is not None:
        body["due_date"] = args.due
    if args.agent is not None:
        body["assigned_agent"] = args.agent
    if args.unassign:
        body["assigned_agent"] = None
    if args.tag is not None:
        body["tags"] = args.tag

    if not body:
        print(colorize("Nothing to update", Fore.YELLOW), file=sys.stderr)
        return 1

    async with httpx.AsyncClient() as client:
        response = await client.patch(
            f"{args.base_url}/requests/{args.request_id}", json=body, headers=_get_headers(args)
        )
        if response.status_code != 200:
            return print_error(response)
        data = response.json()

    print(colorize("Updated", Fore.GREEN), format_request_line(data))
    return 0


async def cmd_comment(args):
    """Add a comment to a request."""
    body = {"content": args.content, "type": args.type}

    async with httpx.AsyncClient() as client:
        response = await client.post(
            f"{args.base_url}/requests/{args.request_id}/comments", json=body, headers=_get_headers(args)
        )
        if response.status_code != 200:
            return print_error(response)
        data = response.json()

    print(colorize("Comment added", Fore.GREEN), f"({len(data.get('comments', []))} total)")
    return 0


async def cmd_delete(args):
    """Delete a request."""
    async with httpx.AsyncClient() as client:
        response = await client.delete(f"{args.base_url}/requests/{args.request_id}", headers=_get_headers(args))
        if response.status_code != 204:
            return print_error(response)

    print(colorize("Deleted", Fore.GREEN), args.request_id)
    return 0


async def cmd_stats(args):
    """Show dashboard stats for the acting user."""
    async with httpx.AsyncClient() as client:
        response = await client.get(f"{args.base_url}/requests/stats", headers=_get_headers(args))
        if response.status_code != 200:
            return print_error(response)
        data = response.json()

    print(colorize("\nTotal:", Style.BRIGHT), data["total"])
    print(colorize("Done:", Style.BRIGHT), data["done"], colorize(f"({data['completion_rate']}%)", Style.DIM))
    overdue = data["overdue"]
    print(colorize("Overdue:", Style.BRIGHT), colorize(str(overdue), Fore.RED) if overdue else overdue)
    print(colorize("\nBy status:", Style.BRIGHT))
    for status, count in data.get("by_status", {}).items():
        print(f"  {colorize(status, STATUS_COLORS.get(status, '')):<24} {count}")
    return 0


def _get_headers(args) -> dict:
    """Build identity headers."""
    headers = {"X-User-Id": args.user_id, "X-User-Role": args.role}
    if args.user_name:
        headers["X-User-Name"] = args.user_name
    return headers


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "create": cmd_create,
    "update": cmd_update,
    "comment": cmd_comment,
    "delete": cmd_delete,
    "stats": cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CLI tool for the TaskFlow service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--base-url", default="http://localhost:8060", help="Base URL of the taskflow service")
    parser.add_argument("--user-id", required=True, help="Acting user identity (e.g. AGT-101)")
    parser.add_argument("--user-name", help="Display name (defaults to the user id)")
    parser.add_argument("--role", default="Agent", help="Admin or Agent")
    parser.add_argument("--json", action="store_true", help="Print raw JSON")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # list command
    list_parser = subparsers.add_parser("list", help="List requests")
    list_parser.add_argument("--search", help="Match id, title, description, agent or tags")
    list_parser.add_argument("--status", action="append", help="Filter by status (repeatable)")
    list_parser.add_argument("--priority", action="append", help="Filter by priority (repeatable)")
    list_parser.add_argument("--overdue-only", action="store_true")
    list_parser.add_argument("--mine", action="store_true", help="Only requests assigned to me")
    list_parser.add_argument("--sort-by", default="last_updated", choices=["last_updated", "priority", "due_date"])

    # show command
    show_parser = subparsers.add_parser("show", help="Show a request and its comments")
    show_parser.add_argument("request_id")

    # create command
    create_parser = subparsers.add_parser("create", help="Create a request")
    create_parser.add_argument("title")
    create_parser.add_argument("description")
    create_parser.add_argument("--priority")
    create_parser.add_argument("--due", help="Due date (ISO-8601)")
    create_parser.add_argument("--agent", help="Assign to agent (admin only)")
    create_parser.add_argument("--tag", action="append")

    # update command
    update_parser = subparsers.add_parser("update", help="Update a request")
    update_parser.add_argument("request_id")
    update_parser.add_argument("--title")
    update_parser.add_argument("--description")
    update_parser.add_argument("--status")
    update_parser.add_argument("--priority")
    update_parser.add_argument("--due", help="Due date (ISO-8601, admin only)")
    update_parser.add_argument("--agent", help="Reassign (admin only)")
    update_parser.add_argument("--unassign", action="store_true", help="Clear assignment (admin only)")
    update_parser.add_argument("--tag", action="append", help="Replace tags (repeatable)")

    # comment command
    comment_parser = subparsers.add_parser("comment", help="Comment on a request")
    comment_parser.add_argument("request_id")
    comment_parser.add_argument("content")
    comment_parser.add_argument("--type", default="General", choices=["General", "Status Update"])

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a request (admin only)")
    delete_parser.add_argument("request_id")

    # stats command
    subparsers.add_parser("stats", help="Dashboard summary")

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    return asyncio.run(command(args))


if __name__ == "__main__":
    sys.exit(main() or 0)
