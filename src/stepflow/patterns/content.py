"""
Content Workflows

reading-time-workflow:
    validate-content -> compute-reading-time -> classify-difficulty

content-processing-workflow:
    validate-content -> enhance-content -> generate-summary -> ai-analysis

Content shorter than five words is rejected by validate-content's input
contract, so nothing downstream runs. ai-analysis asks the "content" model
for a JSON verdict and degrades to a fixed score when the reply is not
usable JSON.
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.abstractions import IModelProvider
from ..core.context import CollaboratorContext
from ..core.json_repair import parse_json_response
from ..workflows import WorkflowDefinition, create_step, create_workflow
from .prompts import CONTENT_ANALYSIS_PROMPT

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
MIN_WORDS = 5
FALLBACK_SCORE = 7

ContentType = Literal["article", "blog", "social"]
Difficulty = Literal["easy", "medium", "hard"]


def count_words(text: str) -> int:
    return len(text.split())


def reading_time_minutes(word_count: int) -> int:
    """Minutes at 200 words per minute, rounded up."""
    return math.ceil(word_count / WORDS_PER_MINUTE)


def classify_difficulty(word_count: int) -> Difficulty:
    """easy below 100 words, medium for 100-300, hard above 300."""
    if word_count < 100:
        return "easy"
    if word_count <= 300:
        return "medium"
    return "hard"


# =============================================================================
# SCHEMAS
# =============================================================================

class ContentInput(BaseModel):
    """Workflow input: raw content submission."""

    content: str = Field(..., min_length=1)
    type: ContentType = "article"


class ContentSubmission(ContentInput):
    """Content long enough to process."""

    @field_validator("content")
    @classmethod
    def at_least_five_words(cls, value: str) -> str:
        words = count_words(value)
        if words < MIN_WORDS:
            raise ValueError(f"Content too short: {words} words (minimum {MIN_WORDS})")
        return value


class ValidatedContent(BaseModel):
    content: str
    type: str
    word_count: int
    is_valid: bool


class TimedContent(BaseModel):
    content: str
    type: str
    word_count: int
    reading_time: int


class ClassifiedContent(TimedContent):
    difficulty: Difficulty


class ContentMetadata(BaseModel):
    reading_time: int
    difficulty: Difficulty
    processed_at: str


class EnhancedContent(BaseModel):
    content: str
    type: str
    word_count: int
    metadata: ContentMetadata


class SummarizedContent(EnhancedContent):
    summary: str


class AIAnalysis(BaseModel):
    score: float
    feedback: str


class AnalyzedContent(SummarizedContent):
    ai_analysis: AIAnalysis


# =============================================================================
# STEPS
# =============================================================================

def _validate(data: ContentSubmission, context: CollaboratorContext) -> dict:
    content = data.content.strip()
    return {
        "content": content,
        "type": data.type,
        "word_count": count_words(content),
        "is_valid": True,
    }


def _compute_reading_time(data: ValidatedContent, context: CollaboratorContext) -> dict:
    return {
        "content": data.content,
        "type": data.type,
        "word_count": data.word_count,
        "reading_time": reading_time_minutes(data.word_count),
    }


def _classify(data: TimedContent, context: CollaboratorContext) -> dict:
    return {**data.model_dump(), "difficulty": classify_difficulty(data.word_count)}


def _enhance(data: ValidatedContent, context: CollaboratorContext) -> dict:
    return {
        "content": data.content,
        "type": data.type,
        "word_count": data.word_count,
        "metadata": {
            "reading_time": reading_time_minutes(data.word_count),
            "difficulty": classify_difficulty(data.word_count),
            "processed_at": datetime.now(timezone.utc).isoformat(),
        },
    }


def summarize(content: str, content_type: str, word_count: int, reading_time: int) -> str:
    """First sentence, plus a length note for content over 50 words."""
    sentences = [s.strip() for s in re.split(r"[.!?]+", content) if s.strip()]
    summary = (sentences[0] if sentences else content.strip()) + "."
    if word_count > 50:
        summary += (
            f" This {content_type} contains {word_count} words and takes approximately "
            f"{reading_time} minute(s) to read."
        )
    return summary


def _generate_summary(data: EnhancedContent, context: CollaboratorContext) -> dict:
    summary = summarize(data.content, data.type, data.word_count, data.metadata.reading_time)
    logger.info(f"[generate-summary] Generated summary: {len(summary)} characters")
    return {**data.model_dump(), "summary": summary}


def parse_analysis(text: str) -> AIAnalysis:
    """
    Parse a model verdict, falling back to a fixed score.

    Args:
        text: Raw model reply

    Returns:
        AIAnalysis from the JSON in the reply, or score 7 with the raw text
        as feedback when no usable JSON object is present
    """
    parsed = parse_json_response(text)
    if parsed is not None:
        try:
            return AIAnalysis.model_validate(parsed)
        except ValidationError as e:
            logger.warning(f"[ai-analysis] JSON reply has the wrong shape: {e.error_count()} error(s)")
    return AIAnalysis(score=FALLBACK_SCORE, feedback="AI analysis completed. " + text)


async def _analyze(data: SummarizedContent, context: CollaboratorContext) -> dict:
    model: IModelProvider = context.get_model("content")
    prompt = CONTENT_ANALYSIS_PROMPT.format(
        content_type=data.type,
        content=data.content,
        word_count=data.word_count,
        reading_time=data.metadata.reading_time,
        difficulty=data.metadata.difficulty,
    )
    response = await model.generate([{"role": "user", "content": prompt}])
    analysis = parse_analysis(response.text)
    logger.info(f"[ai-analysis] AI score: {analysis.score}/10")
    return {**data.model_dump(), "ai_analysis": analysis.model_dump()}


validate_content_step = create_step(
    id="validate-content",
    description="Validates incoming text content",
    input_schema=ContentSubmission,
    output_schema=ValidatedContent,
    execute=_validate,
)

compute_reading_time_step = create_step(
    id="compute-reading-time",
    description="Computes reading time at 200 words per minute",
    input_schema=ValidatedContent,
    output_schema=TimedContent,
    execute=_compute_reading_time,
)

classify_difficulty_step = create_step(
    id="classify-difficulty",
    description="Classifies difficulty from the word count",
    input_schema=TimedContent,
    output_schema=ClassifiedContent,
    execute=_classify,
)

enhance_content_step = create_step(
    id="enhance-content",
    description="Adds metadata to validated content",
    input_schema=ValidatedContent,
    output_schema=EnhancedContent,
    execute=_enhance,
)

generate_summary_step = create_step(
    id="generate-summary",
    description="Creates a summary of the content",
    input_schema=EnhancedContent,
    output_schema=SummarizedContent,
    execute=_generate_summary,
)

ai_analysis_step = create_step(
    id="ai-analysis",
    description="AI-powered content analysis",
    input_schema=SummarizedContent,
    output_schema=AnalyzedContent,
    execute=_analyze,
)


# =============================================================================
# WORKFLOWS
# =============================================================================

def build_reading_time_workflow() -> WorkflowDefinition:
    return (
        create_workflow(
            id="reading-time-workflow",
            input_schema=ContentInput,
            output_schema=ClassifiedContent,
            description="Validates content, computes reading time and classifies difficulty",
        )
        .then(validate_content_step)
        .then(compute_reading_time_step)
        .then(classify_difficulty_step)
        .commit()
    )


def build_content_workflow() -> WorkflowDefinition:
    return (
        create_workflow(
            id="content-processing-workflow",
            input_schema=ContentInput,
            output_schema=AnalyzedContent,
            description="Validates, enhances, and summarizes content with AI analysis",
        )
        .then(validate_content_step)
        .then(enhance_content_step)
        .then(generate_summary_step)
        .then(ai_analysis_step)
        .commit()
    )
