"""
Prompt assembly - Builds the tutor prompt from learner preferences.

build_prompt() is a pure function of Preferences: it returns a template that
still contains the {context}, {question}, {learningStyle} and
{complexityLevel} placeholders. fill_prompt() substitutes them.

Layout of a built template:
    base block (always)
    learning-style line (Visual / Auditory / Read/Write / Kinesthetic only)
    examples line      (include_examples)
    analogies line     (include_analogies)
    questions line     (include_questions)
"""

from textbook_tutor.config import (
    ANALOGIES_INSTRUCTION,
    BASE_PROMPT_TEMPLATE,
    EXAMPLES_INSTRUCTION,
    LEARNING_STYLE_INSTRUCTIONS,
    QUESTIONS_INSTRUCTION,
)
from textbook_tutor.session import Preferences

# Separator placed between chunks when they are combined into {context}
CONTEXT_SEPARATOR = "\n\n"


def build_prompt(preferences: Preferences) -> str:
    """
    Build the prompt template for a set of preferences.

    Args:
        preferences: The learner's current preferences

    Returns:
        Template string with {context}, {question}, {learningStyle} and
        {complexityLevel} placeholders

    Example:
        template = build_prompt(Preferences(learning_style="Visual"))
        prompt = fill_prompt(template, chunks, "What is osmosis?", preferences)
    """
    lines = [BASE_PROMPT_TEMPLATE]

    style_line = LEARNING_STYLE_INSTRUCTIONS.get(preferences.learning_style)
    if style_line:
        lines.append(style_line)
    if preferences.include_examples:
        lines.append(EXAMPLES_INSTRUCTION)
    if preferences.include_analogies:
        lines.append(ANALOGIES_INSTRUCTION)
    if preferences.include_questions:
        lines.append(QUESTIONS_INSTRUCTION)

    return "\n".join(lines)


def fill_prompt(
    template: str,
    context_chunks: list[str],
    question: str,
    preferences: Preferences,
) -> str:
    """
    Substitute every placeholder in a built template.

    Chunks are joined with a blank line to form {context}. The question is
    inserted as-is; braces inside chunks or the question are left untouched.
    """
    return template.format(
        context=CONTEXT_SEPARATOR.join(context_chunks),
        question=question,
        learningStyle=preferences.learning_style,
        complexityLevel=preferences.complexity_level,
    )
