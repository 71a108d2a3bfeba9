"""
Thoughts Portal CLI
===================
Submit, list and triage thoughts against a deployed Thoughts API, or run the
API locally.

Example usage:
  export THOUGHTS_API_URL=https://abc123.execute-api.us-east-1.amazonaws.com/
  thoughts login
  thoughts submit "Call the plumber" --category Family
  thoughts list
  thoughts ack thought_2024-05-01T12:00:00.123Z
  thoughts status thought_2024-05-01T12:00:00.123Z
  thoughts delete thought_2024-05-01T12:00:00.123Z

  # Local API with an in-memory store
  AUTH_USERNAME=me AUTH_PASSWORD=secret thoughts serve --memory
"""
import argparse
import getpass
import logging
import os
import sys

import httpx

from portal.client import PortalApiError, ThoughtsClient, UnauthorizedError
from portal.credentials import (
    PLAINTEXT_WARNING,
    clear_credentials,
    load_credentials,
    save_credentials,
)

CATEGORIES = ["General", "Work", "Family", "Health", "Relationship", "Other"]


# ---------------------------
# Credentials
# ---------------------------

def prompt_credentials():
    username = input("Username: ").strip()
    password = getpass.getpass("Password: ")
    path = save_credentials(username, password)
    print(PLAINTEXT_WARNING.format(path=path))
    return username, password


def call_with_login(url, action):
    """Run action(client); on 401 ask for credentials again and retry once."""
    creds = load_credentials() or prompt_credentials()
    client = ThoughtsClient(url, *creds)
    try:
        return action(client)
    except UnauthorizedError:
        print("[!] Unauthorized, please log in again")
        clear_credentials()
    finally:
        client.close()

    client = ThoughtsClient(url, *prompt_credentials())
    try:
        return action(client)
    finally:
        client.close()


# ---------------------------
# Rendering
# ---------------------------

def _yes_no(value):
    return "yes" if value else "no"


def render_thoughts(thoughts):
    if not thoughts:
        print("No thoughts yet.")
        return
    for t in thoughts:
        print(f"{t['id']}  [{t.get('status') or 'pending'}]  {t.get('category', 'general')}")
        print(f"    {t.get('content', '')}")
        print(
            f"    acknowledged: {_yes_no(t.get('isAcknowledged'))}"
            f"  action taken: {_yes_no(t.get('actionTaken'))}"
        )


def find_thought(client, thought_id):
    for t in client.list_thoughts():
        if t["id"] == thought_id:
            return t
    raise LookupError(f"No thought with id {thought_id}")


# ---------------------------
# Commands
# ---------------------------

def cmd_login(args):
    prompt_credentials()
    return 0


def cmd_logout(args):
    if clear_credentials():
        print("[*] Credentials removed")
    else:
        print("[*] No stored credentials")
    return 0


def cmd_list(args):
    render_thoughts(call_with_login(args.url, lambda c: c.list_thoughts()))
    return 0


def cmd_submit(args):
    def submit(client):
        client.create_thought(args.content, args.category.lower())
        print("[*] Thank you for sharing your thoughts!")
        return client.list_thoughts()

    render_thoughts(call_with_login(args.url, submit))
    return 0


def _toggle(field):
    def change(thought):
        return {field: not thought.get(field, False)}
    return change


def _toggle_status(thought):
    return {"status": "pending" if thought.get("status") == "completed" else "completed"}


def cmd_update(args):
    def update(client):
        thought = find_thought(client, args.id)
        client.update_thought(thought, **args.change(thought))
        return client.list_thoughts()

    render_thoughts(call_with_login(args.url, update))
    return 0


def cmd_delete(args):
    def delete(client):
        client.delete_thought(find_thought(client, args.id))
        return client.list_thoughts()

    render_thoughts(call_with_login(args.url, delete))
    return 0


def cmd_serve(args):
    from portal.devserver import run_server

    run_server(args.host, args.port, memory=args.memory)
    return 0


# ---------------------------
# CLI Interface
# ---------------------------

def build_parser():
    parser = argparse.ArgumentParser(prog="thoughts", description="Thoughts Portal CLI")
    parser.add_argument(
        "--url",
        default=os.environ.get("THOUGHTS_API_URL"),
        help="Thoughts API endpoint (default $THOUGHTS_API_URL)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Store credentials").set_defaults(func=cmd_login, needs_url=False)
    sub.add_parser("logout", help="Forget stored credentials").set_defaults(func=cmd_logout, needs_url=False)
    sub.add_parser("list", help="List thoughts, newest first").set_defaults(func=cmd_list, needs_url=True)

    s = sub.add_parser("submit", help="Submit a new thought")
    s.add_argument("content", help="Thought text")
    s.add_argument("--category", default="General", choices=CATEGORIES, help="Category (default General)")
    s.set_defaults(func=cmd_submit, needs_url=True)

    toggles = [
        ("ack", "Toggle acknowledged", _toggle("isAcknowledged")),
        ("action", "Toggle action taken", _toggle("actionTaken")),
        ("status", "Toggle pending/completed", _toggle_status),
    ]
    for name, help_text, change in toggles:
        t = sub.add_parser(name, help=help_text)
        t.add_argument("id", help="Thought id")
        t.set_defaults(func=cmd_update, change=change, needs_url=True)

    d = sub.add_parser("delete", help="Soft-delete a thought")
    d.add_argument("id", help="Thought id")
    d.set_defaults(func=cmd_delete, needs_url=True)

    b = sub.add_parser("serve", help="Run the API locally")
    b.add_argument("--host", default="127.0.0.1", help="Bind address (default 127.0.0.1)")
    b.add_argument("--port", default=8080, type=int, help="Port (default 8080)")
    b.add_argument("--memory", action="store_true", help="Use an in-memory store instead of DynamoDB")
    b.set_defaults(func=cmd_serve, needs_url=False)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.needs_url and not args.url:
        parser.error("--url or THOUGHTS_API_URL is required")

    try:
        return args.func(args)
    except (PortalApiError, httpx.HTTPError, LookupError) as e:
        print(f"[✗] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
