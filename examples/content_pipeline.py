"""Content pipeline example: reading time, difficulty and AI analysis."""

import asyncio
import json

from stepflow import build_default_host, load_settings

ARTICLE = """Workflow engines let you describe a process as a sequence of small, typed steps.
Each step declares what it accepts and what it returns, so mismatches are caught
before anything runs. Parallel and conditional stages keep independent work fast
and let the data decide which path to take."""


async def main():
    # Reads .env, then STEPFLOW_* variables (provider, model, log level)
    settings = load_settings()
    host = build_default_host(settings)

    print("=" * 60)
    print(host.get("content-processing-workflow").describe())
    print("=" * 60)

    result = await host.run("reading-time-workflow", {"content": ARTICLE})
    print(f"\nReading time: {json.dumps(result.value, indent=2)}")

    result = await host.run("content-processing-workflow", {"content": ARTICLE, "type": "blog"})
    if result.ok:
        print(f"\nAI analysis: {result.value['ai_analysis']}")
        print(f"Summary: {result.value['summary']}")
    else:
        print(f"\nFailed at {list(result.path)}: {result.message}")

    # Too short: rejected by validate-content before anything else runs
    result = await host.run("reading-time-workflow", {"content": "a"})
    print(f"\nShort input -> {result.kind.value} at {list(result.path)}")
    print(json.dumps(result.metrics.get_summary(), indent=2, default=str))


if __name__ == "__main__":
    asyncio.run(main())
