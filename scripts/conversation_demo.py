#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Callable, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from planyt.assistant.conversation import ConversationHandler
from planyt.connection.query_engine import FlightSQLQueryEngine
from planyt.storage.json_store import JsonFileStore
from planyt.utils.config import load_settings


def run_loop(handler: ConversationHandler, user_id: str, read: Callable[[str], str] = input) -> int:
    """Answer requests until an empty line or EOF."""
    turns = 0
    while True:
        try:
            text = read("You: ")
        except EOFError:
            break
        if not text.strip():
            break
        response = handler.handle(text, user_id)
        print("Assistant:", response.human_message)
        print("Payload:", json.dumps(response.payload, indent=2, default=str))
        turns += 1
    return turns


def main(handler: Optional[ConversationHandler] = None) -> int:
    user_id = os.getenv("CONVERSATION_USER_ID", "demo-user")
    if handler is None:
        handler = ConversationHandler(
            engine=FlightSQLQueryEngine(),
            store=JsonFileStore(load_settings().store_dir),
        )
    print("Conversational Planning Demo -- ask about forecasts, simulations, or recall.")
    run_loop(handler, user_id)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
