"""System prompt and conversation history construction shared by every provider."""

from stealthassist.models import ChatMessage, ConversationContext, Mode, Sender

MAX_RECENT_MESSAGES = 5

BASE_PROMPT = """You are a stealth AI assistant designed to help professionals, students, and everyday users. You should be:
- Concise and helpful
- Professional but friendly
- Adaptable to different contexts (work, study, personal)
- Capable of analyzing screens, helping with coding, interview prep, and general tasks
- Discreet and privacy-conscious"""

SCREENSHOT_CLAUSE = (
    "You have access to a screenshot of the user's screen. "
    "Analyze it to provide relevant assistance."
)

# Appended in this order, after the screenshot clause.
MODE_CLAUSES: dict[Mode, str] = {
    Mode.INTERVIEW: (
        "The user is in interview preparation mode. Focus on interview-related assistance."
    ),
    Mode.CODING: "The user is coding. Focus on programming assistance and code analysis.",
    Mode.LEARNING: (
        "The user is in learning mode. "
        "Focus on educational explanations and concept clarification."
    ),
}


def build_system_prompt(context: ConversationContext) -> str:
    """Base persona, then screenshot clause, then mode clauses in fixed order."""
    parts = [BASE_PROMPT]
    if context.screenshot:
        parts.append(SCREENSHOT_CLAUSE)
    for mode, clause in MODE_CLAUSES.items():
        if context.settings.mode == mode:
            parts.append(clause)
    return "\n\n".join(parts)


def _recent(messages: list[ChatMessage]) -> list[ChatMessage]:
    return messages[-MAX_RECENT_MESSAGES:]


def build_message_history(messages: list[ChatMessage]) -> list[dict]:
    """user→user / assistant→assistant (Anthropic, OpenAI-compatible)."""
    return [
        {
            "role": "user" if m.sender == Sender.USER else "assistant",
            "content": m.content,
        }
        for m in _recent(messages)
    ]


def build_gemini_history(messages: list[ChatMessage]) -> list[dict]:
    """user→user / assistant→model, text wrapped in parts."""
    return [
        {
            "role": "user" if m.sender == Sender.USER else "model",
            "parts": [{"text": m.content}],
        }
        for m in _recent(messages)
    ]
