#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no Telegram).

Usage:
  python3 scripts/chat_local.py

What it does:
- Keeps a stable session id for the run
- Sends typed lines through the same ConversationCoordinator the webhook uses,
  against the live upstream
- Prints every reply with its buttons; type !<n> to press button n of the last reply
"""

from __future__ import annotations

import asyncio
import os
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.domain.entities.reply import RenderInstruction  # noqa: E402
from app.wiring.dependencies import get_coordinator  # noqa: E402


def _print_header(session_id: str) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"session_id: {session_id}")
    print("Type a message and press Enter. /start begins a search.")
    print("Commands: !<n> (press button n), /new (new session), /quit, /help")
    print("-" * 60)


def _print_replies(replies: list[RenderInstruction]) -> list[str]:
    tokens: list[str] = []
    if not replies:
        print("(no reply)")
    for reply in replies:
        print(f"\n{reply.text}")
        for choice in reply.choices:
            tokens.append(choice.token)
            print(f"  [{len(tokens)}] {choice.label}")
    return tokens


async def main() -> None:
    session_id = os.getenv("CHAT_SESSION_ID", "local_user_1")
    coordinator = get_coordinator()
    _print_header(session_id)
    last_tokens: list[str] = []

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  !<n>  -> press button n of the last reply")
            print("  /new  -> start a new session id")
            print("  /quit -> exit")
            continue
        if cmd == "/new":
            session_id = f"local_user_{int(time.time())}"
            print(f"New session_id: {session_id}")
            continue

        if user_text.startswith("!"):
            raw = user_text[1:]
            if not raw.isdecimal() or not 1 <= int(raw) <= len(last_tokens):
                print("No such button.")
                continue
            replies = await coordinator.on_user_choice(session_id, last_tokens[int(raw) - 1])
        else:
            replies = await coordinator.on_user_text(session_id, user_text)

        last_tokens = _print_replies(replies)
        print("-" * 60)


if __name__ == "__main__":
    asyncio.run(main())
