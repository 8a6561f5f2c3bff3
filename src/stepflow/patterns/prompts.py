"""Prompt templates for the pattern workflows."""

CONTENT_ANALYSIS_SYSTEM = """You are a content analyst. You review written content and give a \
quality score from 1 to 10 with brief, concrete feedback. Answer with JSON only."""

CONTENT_ANALYSIS_PROMPT = """Analyze this {content_type} content:

Content: "{content}"
Word count: {word_count}
Reading time: {reading_time} minutes
Difficulty: {difficulty}

Please provide:
1. A quality score from 1-10
2. Brief feedback on strengths and areas for improvement

Format as JSON: {{"score": number, "feedback": "your feedback here"}}
"""
