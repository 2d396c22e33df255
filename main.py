"""TrendScope - tech content aggregation with AI research tools

Simple CLI for the API server, the chat assistant and ResearchMind.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from trendscope.api_client import TrendScopeClient
from trendscope.models.content import ContentItem
from trendscope.services.assistant import build_platform_context
from trendscope.services.chat import ChatSession
from trendscope.services.content_feed import load_feed
from trendscope.services.pipeline import PipelineStage, ResearchSession, SessionSnapshot
from trendscope.services.report import render_report, report_filename


async def run_chat(message: str, base_url: str | None = None, feeds: list[Path] | None = None) -> int:
    """Send one message to the assistant and print the streamed reply.

    With ``feeds``, the loaded content is summarized into the platform context
    so the assistant can refer to it.
    """
    context = None
    if feeds:
        items = await load_feed(feeds)
        context = build_platform_context(items)
        print(f"[*] Loaded {context.totalItems} items ({context.contentTypes})")
    printed = 0

    def on_update(messages):
        nonlocal printed
        last = messages[-1] if messages else None
        if last is not None and last.role == "assistant":
            print(last.content[printed:], end="", flush=True)
            printed = len(last.content)

    async with TrendScopeClient(base_url) as client:
        session = ChatSession(client, platform_context=context, on_update=on_update)
        turn = await session.send(message)

    print()
    if turn is None:
        print("[!] Nothing to send")
        return 1
    if not turn.ok:
        print(f"[!] Error: {turn.error}")
        return 1
    return 0


async def run_analysis(
    path: Path,
    base_url: str | None = None,
    out: Path | None = None,
    feeds: list[Path] | None = None,
) -> int:
    """Analyze the paper described in a JSON file ({"paper": ..., "pool": [...]}).

    Items from ``feeds`` are added to the pool related papers are drawn from.
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    paper = ContentItem.model_validate(payload["paper"])
    pool = [ContentItem.model_validate(item) for item in payload.get("pool", [])]
    if feeds:
        known = {item.id for item in pool}
        pool.extend(item for item in await load_feed(feeds) if item.id not in known)

    print(f"Analyzing: {paper.title}")
    print("-" * 50)

    last_stage: PipelineStage | None = None

    def on_change(snapshot: SessionSnapshot):
        nonlocal last_stage
        if snapshot.stage != last_stage and snapshot.is_open:
            last_stage = snapshot.stage
            print(f"[~] {snapshot.stage.value}")

    async with TrendScopeClient(base_url) as client:
        session = ResearchSession.from_client(client)
        session.subscribe(on_change)
        snapshot = await session.analyze(paper, pool)
        video = await session.lookup.wait()
        await session.dispose()

    if snapshot.stage is PipelineStage.ERROR or snapshot.result is None:
        print(f"\n[!] Error: {snapshot.error or 'Analysis failed'}")
        return 1

    report = render_report(paper.title, snapshot.result, video)
    if out is not None:
        target = out / report_filename(paper.title) if out.is_dir() else out
        target.write_text(report, encoding="utf-8")
        print(f"\n[*] Report written to {target}")
    else:
        print(f"\n{report}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="TrendScope")
    parser.add_argument("--base-url", help="TrendScope API base URL (default: from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    chat = sub.add_parser("chat", help="Ask the AI assistant one question")
    chat.add_argument("--message", "-m", required=True, help="Message to send")
    chat.add_argument("--content", "-c", type=Path, action="append", help="JSON content feed (repeatable)")

    analyze = sub.add_parser("analyze", help="Run a ResearchMind analysis")
    analyze.add_argument("file", type=Path, help="JSON file with 'paper' and 'pool'")
    analyze.add_argument("--out", "-o", type=Path, help="Write the Markdown report here")
    analyze.add_argument("--content", "-c", type=Path, action="append", help="Extra JSON content feed for the pool")

    args = parser.parse_args()

    if args.command == "serve":
        import uvicorn

        uvicorn.run("trendscope.main:app", host=args.host, port=args.port)
        return

    if args.command == "chat":
        sys.exit(asyncio.run(run_chat(args.message, args.base_url, args.content)))

    sys.exit(asyncio.run(run_analysis(args.file, args.base_url, args.out, args.content)))


if __name__ == "__main__":
    main()
