"""Routing and parallel example: branch on request type, fan out city lookups."""

import asyncio

from stepflow import build_default_host, load_settings

REQUESTS = [
    "Hello there!",
    "What's the weather in Lisbon?",
    "Can you calculate 12 * 7",
    "Tell me something interesting",
]


async def main():
    host = build_default_host(load_settings())

    print("Request routing")
    print("-" * 60)
    for text in REQUESTS:
        result = await host.run("request-routing-workflow", {"user_input": text})
        print(f"{text!r:40} -> [{result.value['type']}] {result.value['response']}")

    print("\nWord-count routing")
    print("-" * 60)
    for n in (10, 60):
        text = " ".join(["word"] * n)
        result = await host.run("word-count-routing-workflow", {"text": text})
        print(f"{n} words -> {result.value['route']}")

    print("\nCity info (three lookups in parallel)")
    print("-" * 60)
    result = await host.run("city-info-workflow", {"city": "Porto"})
    summary = result.metrics.get_summary()
    print(result.value["recommendation"])
    print(f"Took {summary['total_duration_ms']:.0f}ms for {summary['steps_executed']} steps")


if __name__ == "__main__":
    asyncio.run(main())
