"""Interactive REPL for navigating databases and running script commands."""

from __future__ import annotations

import argparse
import asyncio
import inspect
import json
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path
from typing import Any

from schemejs.bootstrap import Session, bootstrap, load_table
from schemejs.context import Context, ReplError, ReplQueryState, query_state
from schemejs.engine import DryRunEngine, Engine

REPL_ERROR_MESSAGES = {
    ReplError.ALREADY_IN_CONTEXT: (
        "[Info] Already in database context. "
        "Exit by calling `exit()` or by doing `use(db_name, table_name)`"
    ),
    ReplError.UNEXPECTED_USE_ARGS_LENGTH: "[Error] Method `use` is expecting two arguments.",
    ReplError.ALREADY_IN_GLOBAL: (
        "[Info] Already in global context. Press CTRL+D or type `close()` to exit."
    ),
}


def format_prompt(context: Context) -> str:
    """Render the prompt for the current navigation state."""
    state = query_state(context)
    if state is ReplQueryState.TABLE:
        return f"({context.db_name}.{context.tbl_name}) > "
    if state is ReplQueryState.DATABASE:
        return f"({context.db_name}) > "
    return "(global) > "


def describe_repl_error(result: Any) -> str | None:
    """Return the message for a ``{"REPL_ERR": ...}`` result, else None."""
    if not isinstance(result, dict) or "REPL_ERR" not in result:
        return None
    try:
        return REPL_ERROR_MESSAGES[ReplError(result["REPL_ERR"])]
    except ValueError:
        return f"[Error] {result['REPL_ERR']}"


def format_result(value: Any) -> str:
    """Format a command result for display."""
    if hasattr(value, "to_wire"):
        value = value.to_wire()
    elif hasattr(value, "to_dict"):
        value = value.to_dict()
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)


def execute_line(session: Session, line: str, loop: asyncio.AbstractEventLoop) -> Any:
    """Evaluate a line in the session namespace, awaiting engine calls."""
    result = session.namespace.evaluate(line)  # type: ignore[union-attr]
    if inspect.isawaitable(result):
        result = loop.run_until_complete(result)
    return result


def print_line_result(result: Any) -> None:
    message = describe_repl_error(result)
    if message is not None:
        print(message)
    elif result is not None:
        print(format_result(result))


def new_session(engine: Engine | None = None) -> Session:
    session = Session(engine or DryRunEngine(), repl=True)
    bootstrap(session)
    return session


def run_repl(session: Session) -> int:
    """Run the interactive REPL until close() or end of input."""
    print("SJS REPL")
    print("Navigate with use(db), use(table), use(db, table) and exit(); close() quits.\n")

    # Command history
    history_file = Path.home() / ".sjs_history"
    try:
        readline.read_history_file(history_file)
    except FileNotFoundError:
        pass

    loop = asyncio.new_event_loop()
    try:
        while not session.context.repl_exit:
            try:
                line = input(format_prompt(session.context)).strip()
            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print()
                break

            if not line:
                continue

            try:
                print_line_result(execute_line(session, line, loop))
            except SyntaxError as e:
                print(f"Syntax error: {e}")
            except Exception as e:
                print(f"Error: {e}")

            print()

    finally:
        # Save history
        try:
            readline.set_history_length(1000)
            readline.write_history_file(history_file)
        except OSError:
            pass

        loop.close()

    return 0


def run_file(file_path: Path, session: Session | None = None, verbose: bool = False) -> tuple[int, Session]:
    """Execute REPL commands from a file, one per line.

    Args:
        file_path: Path to the file containing commands
        session: Optional REPL session to run in; a new one is created otherwise
        verbose: If True, print each command before executing

    Returns:
        (0 on success or 1 on error, the session the commands ran in)
    """
    if session is None:
        session = new_session()

    try:
        content = file_path.read_text()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1, session

    # Skip blank lines and comments
    commands = [
        line.strip()
        for line in content.split("\n")
        if line.strip() and not line.strip().startswith("#")
    ]
    if not commands:
        print("No commands found in file", file=sys.stderr)
        return 1, session

    loop = asyncio.new_event_loop()
    try:
        for command in commands:
            if session.context.repl_exit:
                break
            if verbose:
                print(f">>> {command}")
            try:
                print_line_result(execute_line(session, command, loop))
            except SyntaxError as e:
                print(f"Syntax error: {e}", file=sys.stderr)
                return 1, session
            except Exception as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1, session
    finally:
        loop.close()

    return 0, session


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Interactive REPL for SchemeJS table scripts"
    )
    arg_parser.add_argument(
        "script",
        type=Path,
        nargs="?",
        default=None,
        help="Table-definition script to load; prints the table descriptor",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single command and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute commands from a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each command before executing (for -f/--file)",
    )
    arg_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    args = arg_parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.script:
        if not args.script.exists():
            print(f"Error: File not found: {args.script}", file=sys.stderr)
            return 1
        try:
            table = load_table(Session(DryRunEngine()), args.script)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(table.to_dict(), indent=2))
        return 0

    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        result, _ = run_file(args.file, verbose=args.verbose)
        return result

    if args.command:
        session = new_session()
        loop = asyncio.new_event_loop()
        try:
            print_line_result(execute_line(session, args.command, loop))
            return 0
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        finally:
            loop.close()

    return run_repl(new_session())


if __name__ == "__main__":
    sys.exit(main())
