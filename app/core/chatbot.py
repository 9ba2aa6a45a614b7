# app/core/chatbot.py
"""Scripted assistant: first keyword rule that matches wins."""
import re
from typing import NamedTuple


class Rule(NamedTuple):
    intent: str
    pattern: re.Pattern
    response: str


RULES: tuple[Rule, ...] = (
    Rule(
        "greeting",
        re.compile(r"\b(hello|hi|hey)\b"),
        "Hello! I'm your learning assistant. How can I help you today?",
    ),
    Rule(
        "assignment",
        re.compile(r"\b(assignment|homework)"),
        "I can help you with assignments! You can:\n"
        "• View your current assignments\n"
        "• Get tips on how to approach them\n"
        "• Learn about submission deadlines\n"
        "• Ask for clarification on requirements\n\n"
        "What specific assignment question do you have?",
    ),
    Rule(
        "course",
        re.compile(r"\b(course|class)"),
        "I can help you with course-related questions:\n"
        "• Browse available courses\n"
        "• Get information about course content\n"
        "• Learn about prerequisites\n"
        "• Find course materials\n\n"
        "What would you like to know about your courses?",
    ),
    Rule(
        "team",
        re.compile(r"\b(team|group)"),
        "Teams are a great way to collaborate! I can help you:\n"
        "• Create or join teams\n"
        "• Manage team projects\n"
        "• Organize team tasks\n\n"
        "What team-related help do you need?",
    ),
    Rule(
        "study",
        re.compile(r"\b(study|learn)"),
        "Here are some effective study strategies:\n"
        "• Break material into smaller chunks\n"
        "• Use active recall techniques\n"
        "• Create a study schedule\n"
        "• Take regular breaks\n"
        "• Practice spaced repetition\n\n"
        "Would you like specific tips for any subject?",
    ),
    Rule(
        "grade",
        re.compile(r"\b(grade|grading|score)"),
        "I can help you understand grading:\n"
        "• Check your current grades\n"
        "• Understand grading rubrics\n"
        "• Get tips to improve your scores\n\n"
        "What specific grading question do you have?",
    ),
    Rule(
        "help",
        re.compile(r"\b(help|support)"),
        "I'm here to help! I can assist you with courses, assignments, "
        "study strategies, team collaboration and platform support. "
        "Please tell me more about what you need.",
    ),
    Rule(
        "technical",
        re.compile(r"\b(technical|bug|error)"),
        "I can help with technical issues such as login problems or platform "
        "navigation. Please describe what's happening and I'll suggest "
        "troubleshooting steps.",
    ),
)

FALLBACK_INTENT = "fallback"


def fallback_response(message: str) -> str:
    return (
        f"I understand you're asking about: {message}\n\n"
        "I can assist with courses, assignments, study tips, team collaboration "
        "and technical support. Could you give me more details?"
    )


def reply(message: str) -> tuple[str, str]:
    """Return ``(intent, response)`` for a user message."""
    text = message.lower()
    for rule in RULES:
        if rule.pattern.search(text):
            return rule.intent, rule.response
    return FALLBACK_INTENT, fallback_response(message.strip())
