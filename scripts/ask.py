#!/usr/bin/env python3
"""
Ask the running backend a question and print the streamed answer.

Posts to /api/chat and rebuilds the answer from the `data:` frames in arrival
order; when the server sends a `search_results` event the sources are listed
after the answer.

Run from project root with the API up (uvicorn search_assistant.main:app):

    python scripts/ask.py "Найди новости о Python 3.13"
    python scripts/ask.py --system "Отвечай одним абзацем" "Что такое asyncio?"
"""

import argparse
import json
import os
import sys

import httpx

API_BASE = os.environ.get("API_BASE", "http://localhost:8000")


def main() -> int:
    parser = argparse.ArgumentParser(description="Stream an answer from the search assistant.")
    parser.add_argument("question", help="Question to send as the user message.")
    parser.add_argument("--system", default=None, help="Optional system instruction override.")
    parser.add_argument("--api-base", default=API_BASE, help=f"Backend URL (default {API_BASE}).")
    args = parser.parse_args()

    body = {"messages": [{"role": "user", "content": args.question}]}
    if args.system:
        body["system"] = args.system

    search_payload = None
    event = None
    with httpx.stream("POST", f"{args.api_base}/api/chat", json=body, timeout=120) as response:
        if response.status_code != 200:
            print(f"Error {response.status_code}: {response.read().decode(errors='replace')}", file=sys.stderr)
            return 1
        for line in response.iter_lines():
            if line.startswith("event:"):
                event = line[6:].strip()
            elif line.startswith("data: ") or line == "data:":
                payload = line[6:]
                if event == "search_results":
                    search_payload = json.loads(payload)
                else:
                    print(payload, flush=True)
            elif not line:
                event = None

    if search_payload and search_payload.get("results"):
        print(f"\nSources for {search_payload.get('query')!r}:")
        for i, r in enumerate(search_payload["results"], 1):
            print(f"  {i}. {r.get('title') or r.get('snippet', '')[:60]} {r.get('url') or ''}".rstrip())
    return 0


if __name__ == "__main__":
    sys.exit(main())
