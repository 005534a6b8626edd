"""LLM-backed message classification and conversation title summarization."""

import structlog

from synapse.core.exceptions import UpstreamServiceError
from synapse.services.llm_provider import LLMProviderBase, LLMProviderError, get_llm_provider

logger = structlog.get_logger()

MESSAGE_TYPES = ("new_problem", "chat", "conjecture", "criticism", "artifact")
DEFAULT_MESSAGE_TYPE = "chat"
RECENT_TURNS = 5
DEFAULT_PROBLEM_TITLE = "New Problem"
DEFAULT_SUMMARY_TITLE = "Untitled Problem"

_CLASSIFIER_SYSTEM = "You are a message classifier. Respond with only the category name."

_CLASSIFY_PROMPT = """\
Classify this user message into one of these categories:

1. "new_problem" - User is describing a new problem/issue
2. "chat" - Regular conversation about existing problem
3. "conjecture" - User is asking for or suggesting a solution
4. "criticism" - User is providing evidence, refutation, or criticism
5. "artifact" - User is sharing files, code, or documentation

Context:
- Existing problems: {problem_titles}
- Recent chat: {recent_chat}
- User message: "{message}"

Respond with ONLY the category name (new_problem, chat, conjecture, criticism, or artifact).
"""

_TITLE_SYSTEM = "Generate a short, clear title for this problem in under 6 words. Return only the title."

_SUMMARY_SYSTEM = (
    "Generate a concise, descriptive title (max 6 words) for this conversation that captures "
    "the main problem or topic being discussed. Return only the title, no quotes or extra text."
)


def normalize_message_type(raw: str) -> str:
    """Map a model answer onto a known message type (``chat`` if unrecognized)."""
    answer = raw.strip().strip("\"'.").lower()
    return answer if answer in MESSAGE_TYPES else DEFAULT_MESSAGE_TYPE


def _clean_title(raw: str, fallback: str) -> str:
    title = raw.strip().strip("\"'")
    return title or fallback


class ClassificationService:
    def __init__(self, llm: LLMProviderBase | None = None):
        self.llm = llm or get_llm_provider()

    async def _complete(self, system_prompt: str, content: str, max_tokens: int, temperature: float) -> str:
        try:
            return await self.llm.chat(
                system_prompt=system_prompt,
                messages=[{"role": "user", "content": content}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except LLMProviderError as e:
            logger.error("classification_llm_error", error=str(e))
            raise UpstreamServiceError(f"AI request failed: {e}") from e

    async def classify(
        self,
        message: str,
        chat_history: list[dict] | None = None,
        existing_problems: list[str] | None = None,
    ) -> dict:
        """Classify ``message``; for a new problem also suggest a title."""
        recent = (chat_history or [])[-RECENT_TURNS:]
        prompt = _CLASSIFY_PROMPT.format(
            problem_titles=", ".join(existing_problems or []),
            recent_chat="\n".join(f"{t['role']}: {t['content']}" for t in recent),
            message=message,
        )
        raw = await self._complete(_CLASSIFIER_SYSTEM, prompt, max_tokens=10, temperature=0.1)
        message_type = normalize_message_type(raw)

        result = {"message_type": message_type, "suggested_title": None}
        if message_type == "new_problem":
            title = await self._complete(_TITLE_SYSTEM, message, max_tokens=20, temperature=0.3)
            result["suggested_title"] = _clean_title(title, DEFAULT_PROBLEM_TITLE)

        logger.info("message_classified", message_type=message_type)
        return result

    async def summarize(self, messages: list[dict]) -> str:
        """Generate a short title for a conversation."""
        transcript = "\n".join(f"{m['role']}: {m['content']}" for m in messages)
        raw = await self._complete(
            _SUMMARY_SYSTEM, f"Conversation:\n{transcript}", max_tokens=50, temperature=0.3
        )
        return _clean_title(raw, DEFAULT_SUMMARY_TITLE)
