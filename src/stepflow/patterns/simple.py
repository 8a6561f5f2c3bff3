"""
Simple Workflow

simple-workflow: process-input -> generate-response
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from ..core.context import CollaboratorContext
from ..workflows import WorkflowDefinition, create_step, create_workflow


class UserMessage(BaseModel):
    user_message: str = Field(..., description="The user message to process")


class ProcessedMessage(BaseModel):
    processed_message: str
    word_count: int
    timestamp: str


class ResponseMetadata(BaseModel):
    word_count: int
    processed_at: str


class SimpleResponse(BaseModel):
    response: str
    metadata: ResponseMetadata


def _process_input(data: UserMessage, context: CollaboratorContext) -> dict:
    return {
        "processed_message": data.user_message.strip().lower(),
        "word_count": len(data.user_message.split()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _generate_response(data: ProcessedMessage, context: CollaboratorContext) -> dict:
    if "weather" in data.processed_message:
        response = f"I see you're asking about weather! Your message had {data.word_count} words."
    elif "calculate" in data.processed_message:
        response = f"I can help with calculations! Your message had {data.word_count} words."
    else:
        response = f"I received your message with {data.word_count} words. How can I help you?"
    return {
        "response": response,
        "metadata": {"word_count": data.word_count, "processed_at": data.timestamp},
    }


process_input_step = create_step(
    id="process-input",
    description="Processes user input and extracts information",
    input_schema=UserMessage,
    output_schema=ProcessedMessage,
    execute=_process_input,
)

generate_response_step = create_step(
    id="generate-response",
    description="Generates a response based on processed input",
    input_schema=ProcessedMessage,
    output_schema=SimpleResponse,
    execute=_generate_response,
)


def build_simple_workflow() -> WorkflowDefinition:
    return (
        create_workflow(
            id="simple-workflow",
            input_schema=UserMessage,
            output_schema=SimpleResponse,
        )
        .then(process_input_step)
        .then(generate_response_step)
        .commit()
    )
