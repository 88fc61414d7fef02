"""
Main entry point for larkcard.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterator, List, Optional

from .constants import APP_NAME, APP_VERSION, APP_DESCRIPTION


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=APP_DESCRIPTION
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}"
    )

    subparsers = parser.add_subparsers(dest="command")

    replay = subparsers.add_parser(
        "replay",
        help="Replay a JSON-lines file of reply payloads into one card"
    )

    replay.add_argument(
        "file",
        type=Path,
        help="JSON-lines file, one reply payload per line"
    )

    replay.add_argument(
        "--chat-id",
        type=str,
        help="Chat to send the card to"
    )

    replay.add_argument(
        "--reply-to",
        type=str,
        help="Message id to reply to"
    )

    replay.add_argument(
        "--publish",
        action="store_true",
        help="Send the card to Feishu/Lark instead of previewing it"
    )

    replay.add_argument(
        "--interval-ms",
        type=int,
        help="Minimum milliseconds between card edits"
    )

    replay.add_argument(
        "--debug-payloads",
        action="store_true",
        help="Log a snapshot of every payload"
    )

    replay.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    settings = subparsers.add_parser(
        "config",
        help="Show or change saved settings"
    )

    settings.add_argument(
        "key",
        nargs="?",
        help="Setting name, e.g. min_update_interval_ms or base_url"
    )

    settings.add_argument(
        "value",
        nargs="?",
        help="New value; the config file is updated when given"
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def setup_logging(verbose: bool) -> None:
    """Route log records through Rich."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
    )


def iter_payloads(path: Path) -> Iterator[Any]:
    """
    Yield the payloads of a JSON-lines file.

    Blank lines are skipped. Lines that are not valid JSON are logged and
    skipped.

    Args:
        path: File to read

    Yields:
        One decoded payload per line
    """
    with open(path, 'r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logger.error("%s:%d: invalid JSON, skipped (%s)", path, line_no, e)


async def replay(args: argparse.Namespace) -> int:
    """Deliver every payload of the replay file into one renderer."""
    from .config import get_config
    from .controller import create_renderer
    from .errors import CardPublishError
    from .publish import ConsoleCardClient, LarkCardClient

    config = get_config()

    if args.interval_ms is not None:
        config.update_renderer(min_update_interval_ms=args.interval_ms)

    if args.debug_payloads:
        config.update_renderer(debug_payloads=True)

    if args.publish:
        if not args.chat_id and not args.reply_to:
            logger.error("--publish needs --chat-id or --reply-to")
            return 2
        if not config.lark.tenant_access_token:
            logger.error("--publish needs a tenant access token (set %s)", config.ENV_TOKEN)
            return 2
        client = LarkCardClient(config.lark)
    else:
        client = ConsoleCardClient()

    renderer = create_renderer(
        client,
        target=args.chat_id or "preview",
        reply_to_message_id=args.reply_to,
        config=config.renderer,
    )

    try:
        for payload in iter_payloads(args.file):
            await renderer.deliver(payload)
        await renderer.finalize()
    except CardPublishError as e:
        logger.error("Publishing failed: %s", e)
        try:
            await renderer.on_error(e)
        except CardPublishError as final_error:
            logger.error("Error card could not be published: %s", final_error)
        return 1
    finally:
        await client.aclose()

    return 0


def parse_setting_value(value: str) -> Any:
    """Convert a command line setting value to a bool, int or float when it looks like one."""
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def configure(args: argparse.Namespace) -> int:
    """
    Show or change saved settings.

    Without a key every setting is printed; with a key only that one. With a
    key and a value the setting is updated and the config file saved. The
    tenant access token is never saved and can only come from the environment.

    Returns:
        Exit code
    """
    from dataclasses import fields

    from rich.console import Console

    from .config import LarkConfig, RendererConfig, get_config

    config = get_config()
    console = Console()
    renderer_keys = {f.name for f in fields(RendererConfig)}
    lark_keys = {f.name for f in fields(LarkConfig)} - {"tenant_access_token"}

    if args.key is None:
        console.print_json(json.dumps(config.to_dict()))
        return 0

    key = args.key.lower()
    if key not in renderer_keys and key not in lark_keys:
        logger.error("Unknown setting: %s", args.key)
        return 2

    if args.value is None:
        section = 'renderer' if key in renderer_keys else 'lark'
        console.print(f"{key}: {config.to_dict()[section][key]}")
        return 0

    value = parse_setting_value(args.value)
    if key in renderer_keys:
        config.update_renderer(**{key: value})
    else:
        config.update_lark(**{key: value})
    config.save()
    console.print(f"Set {key} to {value!r}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    setup_logging(getattr(args, "verbose", False))

    from .errors import ConfigError

    try:
        if args.command == "config":
            return configure(args)
        return asyncio.run(replay(args))
    except ConfigError as e:
        logger.error("%s", e)
        return 2
    except OSError as e:
        logger.error("%s", e)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
