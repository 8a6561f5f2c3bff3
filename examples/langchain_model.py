"""Use a LangChain chat model (ChatOllama) as the content model."""

import asyncio

from stepflow import build_default_host, load_settings
from stepflow.core import LangChainModel
from stepflow.patterns.prompts import CONTENT_ANALYSIS_SYSTEM


async def main():
    # Requires: pip install 'stepflow[ollama]'
    from langchain_ollama import ChatOllama

    settings = load_settings()
    chat = ChatOllama(
        model=settings.llm_model or "qwen2.5:14b",
        base_url=settings.ollama_base_url,
        temperature=settings.llm_temperature,
    )
    host = build_default_host(settings, model=LangChainModel(chat, system_prompt=CONTENT_ANALYSIS_SYSTEM))

    result = await host.run(
        "content-processing-workflow",
        {"content": "Small typed steps compose into reliable pipelines that are easy to test."},
    )
    print(result.value["ai_analysis"] if result.ok else result.message)


if __name__ == "__main__":
    asyncio.run(main())
