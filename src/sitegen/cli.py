import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Callable

from sitegen.client import health_check, list_websites, site_name, website_url
from sitegen.config import ClientConfig, ConfigError, load_client_config
from sitegen.conversation import STEP_MESSAGES, format_questions, render_turn
from sitegen.session import Session, SessionController, Status


def _load_config(args) -> ClientConfig:
    try:
        return load_client_config(
            Path.cwd(),
            base_url=getattr(args, "base_url", None),
            timeout=getattr(args, "timeout", None),
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)


def _prompt(label: str) -> str | None:
    """Read one line from the terminal. None on EOF or Ctrl-C."""
    try:
        return input(label)
    except (EOFError, KeyboardInterrupt):
        print()
        return None


class ProgressPrinter:
    """on_change hook: prints each new workflow step once."""

    def __init__(self) -> None:
        self._last_step = ""

    def __call__(self, session: Session) -> None:
        if session.status != Status.GENERATING:
            return
        step = session.current_step
        if step and step != self._last_step:
            self._last_step = step
            label = STEP_MESSAGES.get(step)
            if label:
                print(render_turn("system", f"{label} ({session.progress}%)"))


def run_generation(
    controller: SessionController,
    description: str,
    base_url: str,
    read_input: Callable[[str], str | None] = _prompt,
) -> int:
    """Drive rounds until the site is built, the user quits, or a round fails.

    Returns a process exit code.
    """
    print(render_turn("human", description))
    session = controller.generate(description)

    while True:
        if session.status == Status.AWAITING_INPUT:
            if session.business_plan:
                print(render_turn("ai", f"Current plan:\n{session.business_plan}"))
            print(render_turn("ai", format_questions(session.pending_questions)))
            answers = read_input("> ")
            if answers is None or not answers.strip():
                print("Stopped. The conversation was not finished.", file=sys.stderr)
                return 1
            print(render_turn("human", answers))
            session = controller.generate("", answers)
            continue

        if session.status == Status.COMPLETED:
            result = session.result
            names = ", ".join(result.pages)
            print(render_turn("system", "Website generated successfully!"))
            print(render_turn(
                "ai",
                f"Your website is ready! I've created {len(result.pages)} pages including {names}.",
            ))
            if result.folder_path:
                print(website_url(base_url, result.folder_path))
            return 0

        if session.status == Status.FAILED:
            print(f"Error: {session.last_error}", file=sys.stderr)
            return 1

        # Still GENERATING: server closed the stream without a final event
        print("Warning: stream ended before generation finished.", file=sys.stderr)
        return 1


def cmd_generate(args):
    config = _load_config(args)
    if args.debug_log:
        config = dataclasses.replace(config, debug_log=Path(args.debug_log))

    description = " ".join(args.description).strip()
    if not description:
        description = (_prompt("Describe the website you want: ") or "").strip()
    if not description:
        print("Error: a website description is required.", file=sys.stderr)
        raise SystemExit(1)

    controller = SessionController.from_config(config, on_change=ProgressPrinter())
    code = run_generation(controller, description, config.base_url)
    if code:
        raise SystemExit(code)


def cmd_list(args):
    config = _load_config(args)
    websites = list_websites(config.base_url)
    if not websites:
        print("No websites generated yet.")
        return
    for site in websites:
        folder = site.get("folder_path") or site.get("name") or ""
        name = site.get("name") or site_name(folder)
        created = site.get("created_at", "")
        line = f"  {name}"
        if created:
            line += f"  ({created})"
        print(line)
        if folder:
            print(f"    {website_url(config.base_url, folder)}")


def cmd_url(args):
    config = _load_config(args)
    print(website_url(config.base_url, args.folder_path))


def cmd_health(args):
    config = _load_config(args)
    if health_check(config.base_url):
        print(f"Backend at {config.base_url} is reachable.")
        return
    print(f"Error: backend at {config.base_url} is not reachable.", file=sys.stderr)
    raise SystemExit(1)


def cmd_ui(args):
    config = _load_config(args)
    from sitegen.tui import run_app
    run_app(config)


def main():
    parser = argparse.ArgumentParser(prog="sitegen", description="Conversational website generator client")
    subparsers = parser.add_subparsers(dest="command")

    def add_connection_args(p):
        p.add_argument("--base-url", help="Backend URL (default: $SITEGEN_API_BASE_URL or http://localhost:8000)")
        p.add_argument("--timeout", type=float, help="Request timeout in seconds")

    gen_parser = subparsers.add_parser("generate", help="Generate a website interactively")
    gen_parser.add_argument("description", nargs="*", help="Website description (prompted if omitted)")
    gen_parser.add_argument("--debug-log", help="Append every stream event to this JSONL file")
    add_connection_args(gen_parser)

    list_parser = subparsers.add_parser("list", help="List previously generated websites")
    add_connection_args(list_parser)

    url_parser = subparsers.add_parser("url", help="Print the preview URL for a generated site folder")
    url_parser.add_argument("folder_path", help="Folder path returned by the backend")
    add_connection_args(url_parser)

    health_parser = subparsers.add_parser("health", help="Check that the backend is reachable")
    add_connection_args(health_parser)

    ui_parser = subparsers.add_parser("ui", help="Open the terminal UI")
    add_connection_args(ui_parser)

    args = parser.parse_args()

    if args.command == "generate":
        cmd_generate(args)
    elif args.command == "list":
        cmd_list(args)
    elif args.command == "url":
        cmd_url(args)
    elif args.command == "health":
        cmd_health(args)
    elif args.command == "ui":
        cmd_ui(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
