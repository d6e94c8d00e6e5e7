import argparse
import json
import os
import sys
from datetime import timedelta
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.json import JSON
import slugid

from cli.client import QueueClient, QueueClientError

# --- Configuration ---
QUEUE_ROOT_URL = os.environ.get("QUEUE_ROOT_URL", "http://localhost:8000")
console = Console()

# --- Helper Functions ---

def print_error(message, details=None):
    console.print(f"[bold red]Error:[/bold red] {message}")
    if details:
        console.print(Panel(str(details), title="Details", border_style="red"))

def print_success(message):
    console.print(f"[bold green]Success:[/bold green] {message}")

def make_client(args) -> QueueClient:
    return QueueClient(args.root_url, token=args.token)

def handle_create_task(args):
    """
    Creates a task from a JSON definition file. A fresh taskId is picked
    unless one is given; rerunning with the same taskId is safe.
    """
    try:
        with open(args.file, encoding="utf-8") as f:
            task_def = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print_error(f"Could not read task definition from {args.file}", e)
        return None

    task_id = args.task_id or slugid.nice()
    client = make_client(args)

    with console.status(f"[bold yellow]Creating task {task_id}...", spinner="dots"):
        try:
            client.create_task(task_id, task_def)
        except QueueClientError as e:
            print_error(f"Queue rejected the task (HTTP {e.status_code})", json.dumps(e.body, indent=2))
            return None

    print_success("Task created!")
    table = Table(title="Task", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="dim")
    table.add_column("Value", style="bold white")
    table.add_row("Task ID", task_id)
    table.add_row("Worker", f"{task_def.get('provisionerId')}/{task_def.get('workerType')}")
    table.add_row("Deadline", str(task_def.get("deadline")))
    console.print(table)
    return task_id

def handle_get_task(args):
    client = make_client(args)
    try:
        task_def = client.task(args.task_id)
    except QueueClientError as e:
        print_error(f"Could not fetch task {args.task_id} (HTTP {e.status_code})", e.body)
        return None
    console.print(JSON(json.dumps(task_def)))
    return task_def

def handle_mint_token(args):
    """
    Signs a bearer token with the server's SECRET_KEY. Needs the same
    environment as the server.
    """
    from app.core.security import create_access_token
    token = create_access_token(
        args.client_id,
        args.scope or [],
        expires_delta=timedelta(minutes=args.expires_minutes),
    )
    print(token)
    return token

def handle_slugid(args):
    value = slugid.nice()
    print(value)
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Task queue CLI")
    parser.add_argument("--root-url", default=QUEUE_ROOT_URL)
    parser.add_argument("--token", default=os.environ.get("QUEUE_TOKEN"))

    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser("create-task", help="Create a task from a JSON file")
    create_parser.add_argument("--file", required=True, help="Path to the task definition")
    create_parser.add_argument("--task-id", help="taskId to use (default: a new slugid)")
    create_parser.set_defaults(func=handle_create_task)

    get_parser = subparsers.add_parser("get-task", help="Show a task definition")
    get_parser.add_argument("task_id")
    get_parser.set_defaults(func=handle_get_task)

    token_parser = subparsers.add_parser("mint-token", help="Sign a bearer token")
    token_parser.add_argument("--client-id", required=True)
    token_parser.add_argument("--scope", action="append", help="Scope to grant (repeatable)")
    token_parser.add_argument("--expires-minutes", type=int, default=60)
    token_parser.set_defaults(func=handle_mint_token)

    slug_parser = subparsers.add_parser("slugid", help="Print a fresh taskId")
    slug_parser.set_defaults(func=handle_slugid)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    result = args.func(args)
    return 0 if result is not None else 1

if __name__ == "__main__":
    sys.exit(main())
