"""Prompt templates for the AI gateway."""

EDITOR_SYSTEM_INSTRUCTION = "You are an expert academic editor."
REVIEWER_SYSTEM_INSTRUCTION = "You are a critical academic peer reviewer."

TRUNCATION_MARKER = " ... [truncated]"
PAPER_START = "--- PAPER START ---"
PAPER_END = "--- PAPER END ---"

CHAT_READY_MESSAGE = "Hello, I'm ready to ask questions."
CHAT_PRIMING_REPLY = "I have read the paper. What would you like to know?"

IMPROVE_INSTRUCTIONS = {
    "grammar": "Fix grammar and spelling errors. Maintain the original tone.",
    "clarity": "Rewrite for clarity and conciseness. Make it easier to read.",
    "academic": "Rewrite using formal academic language suitable for a high-impact journal.",
}

# Structured-output declaration for reviews (Gemini schema dialect)
REVIEW_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": "Brief summary of the paper's contribution",
        },
        "strengths": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of key strengths",
        },
        "weaknesses": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of areas for improvement",
        },
        "score": {
            "type": "NUMBER",
            "description": "Overall quality score from 1-10",
        },
    },
    "required": ["summary", "strengths", "weaknesses", "score"],
}


def summary_prompt(text):
    """Ask for a short abstract-like summary."""
    return (
        "Summarize the following academic paper content in a concise abstract-like "
        "paragraph (max 150 words). Focus on the problem, method, and results.\n\n"
        f"{text}"
    )


def review_prompt(excerpt):
    """Ask for a brief peer review of an (already truncated) excerpt."""
    return (
        "Perform a brief peer review of the following paper text.\n"
        "Identify strengths, weaknesses, and provide an overall quality score out of 10.\n\n"
        "Paper Text:\n"
        f"{excerpt}{TRUNCATION_MARKER}"
    )


def chat_context_prompt(excerpt):
    """Context block that opens every chat request.

    The model is told to answer only from the paper between the delimiters.
    """
    return (
        "Context: You are an intelligent research assistant helping a user understand "
        "the following academic paper.\n"
        "Answer the user's questions based strictly on the paper content provided below. "
        "If the answer is not in the paper, say so.\n\n"
        f"{PAPER_START}\n"
        f"{excerpt}\n"
        f"{PAPER_END}\n"
    )


def improve_prompt(text):
    return f"Rewrite the following text:\n\n{text}"
