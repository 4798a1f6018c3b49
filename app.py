#!/usr/bin/env python3
"""VoiceDrop - Entry Point."""

import argparse

from rich.console import Console

from voicedrop.core.config import load_config
from voicedrop.core.mailbox import VoiceMailbox
from voicedrop.core.session import SessionContext

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="VoiceDrop anonymous voice mailbox")
    parser.add_argument(
        "--config",
        type=str,
        default="config/default.yaml",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--db",
        type=str,
        help="Override database path",
    )
    parser.add_argument(
        "--address",
        type=str,
        default="127.0.0.1",
        help="Network address identifying the caller",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("whoami", help="Print the caller's identity")
    subparsers.add_parser("users", help="List registered identities")
    inbox = subparsers.add_parser("inbox", help="List senders with messages waiting")
    inbox.add_argument(
        "--block",
        nargs="*",
        default=[],
        help="Identities to hide from the inbox",
    )

    send = subparsers.add_parser("send", help="Record a message until Enter is pressed")
    send.add_argument("--to", required=True, help="Recipient identity")

    play = subparsers.add_parser("play", help="Play and consume the next message from a sender")
    play.add_argument("--from", dest="sender", required=True, help="Sender identity")
    return parser


def main():
    """Main entry point for VoiceDrop."""
    args = build_parser().parse_args()

    # Load configuration
    config = load_config(args.config)

    # Apply CLI overrides
    if args.db:
        config.store.db_path = args.db

    ctx = SessionContext.from_address(args.address)
    if args.command == "whoami":
        console.print(ctx.identity)
        return

    mailbox = VoiceMailbox(config)
    try:
        if args.command == "users":
            for identity in mailbox.users():
                console.print(identity)
        elif args.command == "inbox":
            ctx.set_blacklist(args.block)
            senders = mailbox.inbox(ctx)
            if not senders:
                console.print("[dim]No messages.[/dim]")
            for sender in senders:
                console.print(sender)
        elif args.command == "send":
            ctx.select_recipient(args.to)
            mailbox.record_until_enter(ctx)
        elif args.command == "play":
            ctx.select_sender(args.sender)
            delivery = mailbox.play_message(ctx)
            if delivery is None:
                console.print("[yellow]No message from that sender.[/yellow]")
            elif not delivery.ok:
                console.print("[yellow]Message played with errors.[/yellow]")
    finally:
        mailbox.close()


if __name__ == "__main__":
    main()
