"""
Routing Workflows

request-routing-workflow:
    analyze-request -> branch(handle-weather | handle-calculation |
                              handle-greeting | handle-other) -> format-response

word-count-routing-workflow:
    count-words -> branch(quick | general) -> merge-result

Predicates in both workflows are exhaustive and mutually exclusive, so
exactly one arm runs and the final step sees a single-key fan-in.
"""

import logging
import random
import re
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..core.context import CollaboratorContext
from ..core.types import WorkflowError
from ..workflows import WorkflowDefinition, create_step, create_workflow
from .content import count_words, reading_time_minutes, summarize

logger = logging.getLogger(__name__)

RequestType = Literal["weather", "calculation", "greeting", "other"]

QUICK_THRESHOLD = 50

GREETINGS = [
    "Hello! How can I help you today?",
    "Hi there! I'm here to assist with weather, calculations, or just chat!",
    "Hey! What would you like to know?",
]

_WEATHER_WORDS = ("weather", "temperature", "rain", "sunny")
_MATH_EXPRESSION = re.compile(r"(\d+(?:\.\d+)?)\s*[+\-*/]\s*(\d+(?:\.\d+)?)")
_GREETING = re.compile(r"\b(hello|hi|hey)\b")
_CITY = re.compile(r"\bin\s+([a-zA-Z\s]+)", re.IGNORECASE)


# =============================================================================
# REQUEST ROUTING
# =============================================================================

class UserRequest(BaseModel):
    user_input: str = Field(..., description="User input to analyze")


class RequestAnalysis(BaseModel):
    request_type: RequestType
    original_input: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class HandlerResponse(BaseModel):
    response: str
    type: RequestType


class HandlerResponses(BaseModel):
    """Fan-in of the request handlers; only the matched handler is present."""

    weather: Optional[HandlerResponse] = Field(None, alias="handle-weather")
    calculation: Optional[HandlerResponse] = Field(None, alias="handle-calculation")
    greeting: Optional[HandlerResponse] = Field(None, alias="handle-greeting")
    other: Optional[HandlerResponse] = Field(None, alias="handle-other")


def analyze_request(user_input: str) -> dict:
    """Keyword classification of a request with a confidence."""
    text = user_input.lower()
    if any(word in text for word in _WEATHER_WORDS):
        request_type, confidence = "weather", 0.9
    elif "calculate" in text or "math" in text or _MATH_EXPRESSION.search(text):
        request_type, confidence = "calculation", 0.8
    elif _GREETING.search(text):
        request_type, confidence = "greeting", 0.9
    else:
        request_type, confidence = "other", 0.5
    return {"request_type": request_type, "original_input": user_input, "confidence": confidence}


def _analyze(data: UserRequest, context: CollaboratorContext) -> dict:
    analysis = analyze_request(data.user_input)
    logger.info(
        f"[analyze-request] {analysis['request_type']} (confidence {analysis['confidence']})"
    )
    return analysis


def _handle_weather(data: RequestAnalysis, context: CollaboratorContext) -> dict:
    match = _CITY.search(data.original_input)
    city = match.group(1).strip() if match else "your location"
    return {
        "response": (
            f"I can help you with weather information for {city}! The weather tool would "
            "normally fetch real data here. For now, let's say it's sunny and 22°C."
        ),
        "type": "weather",
    }


async def _handle_calculation(data: RequestAnalysis, context: CollaboratorContext) -> dict:
    match = _MATH_EXPRESSION.search(data.original_input)
    if not match:
        return {
            "response": 'I can help with calculations! Please provide a math expression like "5 + 3" or "10 * 2".',
            "type": "calculation",
        }

    expression = match.group(0)
    calculator = context.get_tool("calculator")
    try:
        output = await calculator.call(context, expression=expression)
    except WorkflowError as e:
        logger.warning(f"[handle-calculation] Calculator rejected {expression!r}: {e}")
        return {
            "response": f"I found a math expression ({expression}) but couldn't calculate it safely.",
            "type": "calculation",
        }

    result = output["result"]
    shown = int(result) if float(result).is_integer() else result
    return {"response": f"The result of {expression} is {shown}", "type": "calculation"}


def _handle_greeting(data: RequestAnalysis, context: CollaboratorContext) -> dict:
    return {"response": random.choice(GREETINGS), "type": "greeting"}


def _handle_other(data: RequestAnalysis, context: CollaboratorContext) -> dict:
    return {
        "response": (
            "I'm not sure how to handle that request, but I can help with weather information, "
            "calculations, or just say hello! What would you like to know?"
        ),
        "type": "other",
    }


def _format_response(data: HandlerResponses, context: CollaboratorContext) -> dict:
    handled = [r for r in (data.weather, data.calculation, data.greeting, data.other) if r is not None]
    if len(handled) != 1:
        raise ValueError(f"Expected exactly one handler response, got {len(handled)}")
    return handled[0].model_dump()


analyze_request_step = create_step(
    id="analyze-request",
    description="Analyzes user request to determine the type of response needed",
    input_schema=UserRequest,
    output_schema=RequestAnalysis,
    execute=_analyze,
)

handle_weather_step = create_step(
    id="handle-weather",
    description="Handles weather-related requests",
    input_schema=RequestAnalysis,
    output_schema=HandlerResponse,
    execute=_handle_weather,
)

handle_calculation_step = create_step(
    id="handle-calculation",
    description="Handles calculation requests with the calculator tool",
    input_schema=RequestAnalysis,
    output_schema=HandlerResponse,
    execute=_handle_calculation,
)

handle_greeting_step = create_step(
    id="handle-greeting",
    description="Handles greeting requests",
    input_schema=RequestAnalysis,
    output_schema=HandlerResponse,
    execute=_handle_greeting,
)

handle_other_step = create_step(
    id="handle-other",
    description="Handles other types of requests",
    input_schema=RequestAnalysis,
    output_schema=HandlerResponse,
    execute=_handle_other,
)

format_response_step = create_step(
    id="format-response",
    description="Returns the single handler response",
    input_schema=HandlerResponses,
    output_schema=HandlerResponse,
    execute=_format_response,
)


def _is(request_type: str):
    def predicate(value, context) -> bool:
        return value["request_type"] == request_type

    predicate.__name__ = f"is_{request_type}"
    return predicate


def build_request_routing_workflow() -> WorkflowDefinition:
    return (
        create_workflow(
            id="request-routing-workflow",
            input_schema=UserRequest,
            output_schema=HandlerResponse,
            description="Classifies a request and routes it to a matching handler",
        )
        .then(analyze_request_step)
        .branch(
            [
                (_is("weather"), handle_weather_step),
                (_is("calculation"), handle_calculation_step),
                (_is("greeting"), handle_greeting_step),
                (_is("other"), handle_other_step),
            ]
        )
        .then(format_response_step)
        .commit()
    )


# =============================================================================
# WORD-COUNT ROUTING
# =============================================================================

class TextInput(BaseModel):
    text: str = Field(..., min_length=1)


class CountedText(BaseModel):
    text: str
    word_count: int


class ProcessingResult(BaseModel):
    mode: Literal["quick", "general"]
    word_count: int
    summary: str
    reading_time: Optional[int] = None


class RoutedResults(BaseModel):
    quick: Optional[ProcessingResult] = None
    general: Optional[ProcessingResult] = None


class RoutingResult(BaseModel):
    route: Literal["quick", "general"]
    result: ProcessingResult


def _count_words(data: TextInput, context: CollaboratorContext) -> dict:
    return {"text": data.text, "word_count": count_words(data.text)}


def _quick(data: CountedText, context: CollaboratorContext) -> dict:
    words = data.text.split()
    return {
        "mode": "quick",
        "word_count": data.word_count,
        "summary": " ".join(words[:10]) + ("..." if len(words) > 10 else ""),
    }


def _general(data: CountedText, context: CollaboratorContext) -> dict:
    reading_time = reading_time_minutes(data.word_count)
    return {
        "mode": "general",
        "word_count": data.word_count,
        "summary": summarize(data.text, "text", data.word_count, reading_time),
        "reading_time": reading_time,
    }


def _merge(data: RoutedResults, context: CollaboratorContext) -> dict:
    routed = [(name, result) for name, result in (("quick", data.quick), ("general", data.general)) if result]
    if len(routed) != 1:
        raise ValueError(f"Expected exactly one routed result, got {[name for name, _ in routed]}")
    route, result = routed[0]
    return {"route": route, "result": result.model_dump()}


count_words_step = create_step(
    id="count-words",
    description="Counts the words of the input text",
    input_schema=TextInput,
    output_schema=CountedText,
    execute=_count_words,
)

quick_step = create_step(
    id="quick",
    description=f"Lightweight processing for texts under {QUICK_THRESHOLD} words",
    input_schema=CountedText,
    output_schema=ProcessingResult,
    execute=_quick,
)

general_step = create_step(
    id="general",
    description=f"Full processing for texts of {QUICK_THRESHOLD} words or more",
    input_schema=CountedText,
    output_schema=ProcessingResult,
    execute=_general,
)

merge_result_step = create_step(
    id="merge-result",
    description="Collapses the branch fan-in into the single routed result",
    input_schema=RoutedResults,
    output_schema=RoutingResult,
    execute=_merge,
)


def build_word_count_routing_workflow() -> WorkflowDefinition:
    return (
        create_workflow(
            id="word-count-routing-workflow",
            input_schema=TextInput,
            output_schema=RoutingResult,
            description="Routes short texts to quick processing and longer ones to general processing",
        )
        .then(count_words_step)
        .branch(
            [
                (lambda value, context: value["word_count"] < QUICK_THRESHOLD, quick_step),
                (lambda value, context: value["word_count"] >= QUICK_THRESHOLD, general_step),
            ]
        )
        .then(merge_result_step)
        .commit()
    )
