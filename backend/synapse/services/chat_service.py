"""Chat service: orchestrates one chat turn and the auto-linking of problems.

Per message, in order:
  1. resolve or create the conversation
  2. merge attached file contents into the message text
  3. persist the user message
  4. load the conversation history
  5. link the conversation to an existing problem (keyword match)
  6. generate and persist the assistant reply
  7. create a new problem when still unlinked and the creation policy agrees
  8. save attachments as artifacts of the associated problem

Persistence failures in steps 1, 3 and 6 abort the turn (``ServiceError``);
an LLM failure aborts with ``UpstreamServiceError``. Attachment reads, the
problem lookup, problem creation and artifact saves are best-effort: they are
logged and the turn continues without them.
"""

from contextlib import asynccontextmanager

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from synapse.config import settings
from synapse.core.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    UpstreamServiceError,
)
from synapse.models.conversation import Conversation, Message
from synapse.models.problem import Problem
from synapse.models.user import User
from synapse.schemas.chat import AttachedFile
from synapse.schemas.contribution import ArtifactCreate
from synapse.schemas.problem import ProblemCreate
from synapse.services.artifact_service import ArtifactService
from synapse.services.llm_provider import LLMProviderError, get_llm_provider
from synapse.services.problem_matcher import match_problem
from synapse.services.problem_policy import should_create_problem, synthesize_title
from synapse.services.problem_service import ProblemService
from synapse.utils.file_store import enhance_message

logger = structlog.get_logger()

CONVERSATION_TITLE_LENGTH = 50
PROBLEM_TITLE_MAX_LENGTH = 255
FALLBACK_REPLY = "I'm sorry, I couldn't generate a response."

_SYSTEM_PROMPT = """\
You are Synapse, an AI assistant that helps users solve problems and think through complex issues.
{problem_context}
Be helpful, concise, and encourage critical thinking. If the user seems to be describing a new problem,
help them think through it systematically: clarify the problem, propose conjectures, and look for
criticisms that could refute them.
"""


def conversation_title(message: str) -> str:
    if len(message) > CONVERSATION_TITLE_LENGTH:
        return message[:CONVERSATION_TITLE_LENGTH] + "..."
    return message


def build_system_prompt(problem_title: str | None = None) -> str:
    problem_context = ""
    if problem_title:
        problem_context = f'\nThe user is currently working on the problem: "{problem_title}".\n'
    return _SYSTEM_PROMPT.format(problem_context=problem_context)


class ChatService:
    """Orchestrates AI chat turns and conversation management."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.llm = get_llm_provider()

    @asynccontextmanager
    async def _persistence_step(self, action: str):
        """Turn a database failure in a mandatory step into a ServiceError."""
        try:
            yield
        except SQLAlchemyError as e:
            logger.error("chat_persistence_error", step=action, error=str(e))
            raise ServiceError(f"Failed to {action}: {e}") from e

    async def chat(
        self,
        user: User,
        message: str,
        problem_id: int | None = None,
        conversation_id: int | None = None,
        auto_link: bool = True,
        attached_files: list[AttachedFile] | None = None,
    ) -> dict:
        """Process a chat message and return the AI response.

        Args:
            user: Acting user.
            message: User message text.
            problem_id: Explicit problem context; disables auto-linking.
            conversation_id: Existing conversation to continue, or None for new.
            auto_link: Allow matching/creating a problem for this message.
            attached_files: Uploaded files (name, url, mime_type) to merge into the message.

        Returns:
            {
                "conversation_id": int,
                "problem_id": int | None,
                "problem_linked": bool,
                "linked_problem_title": str | None,
                "problem_created": bool,
                "ai_response": str,
            }
        """
        if not message or not message.strip():
            raise BadRequestError("Message is required")
        attached_files = attached_files or []
        auto_link = auto_link and settings.autolink_enabled

        explicit_problem = None
        if problem_id is not None:
            explicit_problem = await self.db.get(Problem, problem_id)
            if explicit_problem is None:
                raise NotFoundError("Problem")

        # 1. Conversation
        async with self._persistence_step("create conversation"):
            conversation = await self._get_or_create_conversation(
                user, conversation_id, message, explicit_problem
            )

        # 2. Attachments
        enhanced_message = message
        if attached_files:
            enhanced_message = enhance_message(message, attached_files)

        # 3. User message
        async with self._persistence_step("save user message"):
            self.db.add(Message(
                conversation_id=conversation.id,
                role="user",
                content=enhanced_message,
                message_type="chat",
            ))
            await self.db.flush()

        # 4. History (includes the message just saved)
        async with self._persistence_step("load conversation history"):
            history = await self._get_message_history(conversation.id)
        is_first_message = len(history) <= 1

        # 5. Link to an existing problem
        problem_linked = False
        linked_problem_title = None
        context_title = explicit_problem.title if explicit_problem else None

        if conversation.problem_id is None and auto_link:
            matched = await self._match_existing_problem(user, message)
            if matched is not None:
                async with self._persistence_step("link conversation"):
                    conversation.problem_id = matched.id
                    await self.db.flush()
                problem_linked = True
                linked_problem_title = context_title = matched.title
                logger.info(
                    "conversation_linked",
                    conversation_id=conversation.id,
                    problem_id=matched.id,
                )
        elif conversation.problem_id is not None and context_title is None:
            linked = await self.db.get(Problem, conversation.problem_id)
            context_title = linked.title if linked else None

        # 6. Assistant reply
        ai_response = await self._generate_reply(build_system_prompt(context_title), history)
        async with self._persistence_step("save AI response"):
            self.db.add(Message(
                conversation_id=conversation.id,
                role="assistant",
                content=ai_response,
                message_type="chat",
                metadata_={"provider": type(self.llm).__name__, "model": self.llm.get_model_name()},
            ))
            await self.db.flush()

        # 7. New problem
        problem_created = False
        if conversation.problem_id is None and auto_link:
            if should_create_problem(message, is_first_message):
                problem = await self._create_problem_from_message(user, message)
                if problem is not None:
                    async with self._persistence_step("link conversation"):
                        conversation.problem_id = problem.id
                        await self.db.flush()
                    problem_created = True

        associated_problem_id = explicit_problem.id if explicit_problem else conversation.problem_id

        # 8. Artifacts
        if attached_files and associated_problem_id is not None:
            artifacts = ArtifactService(self.db)
            for attached in attached_files:
                await artifacts.try_create_artifact(
                    ArtifactCreate(
                        problem_id=associated_problem_id,
                        name=attached.name,
                        url=attached.url,
                        mime_type=attached.mime_type,
                    ),
                    user,
                )

        async with self._persistence_step("update conversation"):
            conversation.updated_at = func.now()
            await self.db.flush()

        return {
            "conversation_id": conversation.id,
            "problem_id": associated_problem_id,
            "problem_linked": problem_linked,
            "linked_problem_title": linked_problem_title,
            "problem_created": problem_created,
            "ai_response": ai_response,
        }

    async def _match_existing_problem(self, user: User, message: str) -> Problem | None:
        """Best-effort: a failed lookup counts as no match."""
        try:
            async with self.db.begin_nested():
                candidates = await ProblemService(self.db).list_problems(owner=user)
        except SQLAlchemyError as e:
            logger.error("problem_match_query_error", user_id=user.id, error=str(e))
            return None
        return match_problem(message, candidates)

    async def _create_problem_from_message(self, user: User, message: str) -> Problem | None:
        title = synthesize_title(message)[:PROBLEM_TITLE_MAX_LENGTH]
        try:
            async with self.db.begin_nested():
                return await ProblemService(self.db).create_problem(
                    ProblemCreate(title=title, description=message), user
                )
        except SQLAlchemyError as e:
            logger.error("problem_create_error", title=title, error=str(e))
            return None

    async def _generate_reply(self, system_prompt: str, history: list[dict]) -> str:
        try:
            reply = await self.llm.chat(system_prompt=system_prompt, messages=history)
        except LLMProviderError as e:
            logger.error("llm_call_error", error=str(e), provider=type(self.llm).__name__)
            raise UpstreamServiceError(f"Failed to generate AI response: {e}") from e
        return reply or FALLBACK_REPLY

    # ---- conversation management ----

    async def list_conversations(
        self, user: User, problem_id: int | None = None, unlinked: bool = False
    ) -> list[Conversation]:
        """Conversations of a problem, or the actor's unlinked ones."""
        query = select(Conversation).order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        if unlinked:
            query = query.where(
                Conversation.problem_id.is_(None),
                Conversation.created_by == user.id,
            )
        elif problem_id is not None:
            query = query.where(Conversation.problem_id == problem_id)
        else:
            raise BadRequestError("Either problem_id or unlinked=true is required")
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_conversation(self, conversation_id: int) -> Conversation:
        result = await self.db.execute(
            select(Conversation)
            .options(selectinload(Conversation.messages))
            .where(Conversation.id == conversation_id)
        )
        conversation = result.scalar_one_or_none()
        if not conversation:
            raise NotFoundError("Conversation")
        return conversation

    async def list_messages(self, conversation_id: int) -> list[Message]:
        if not await self.db.get(Conversation, conversation_id):
            raise NotFoundError("Conversation")
        result = await self.db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return list(result.scalars().all())

    async def delete_conversation(self, conversation_id: int, user: User) -> None:
        conversation = await self.get_conversation(conversation_id)
        if conversation.created_by != user.id:
            raise ForbiddenError("Not authorized to delete this conversation")
        await self.db.delete(conversation)
        await self.db.flush()

    async def _get_or_create_conversation(
        self,
        user: User,
        conversation_id: int | None,
        message: str,
        explicit_problem: Problem | None,
    ) -> Conversation:
        if conversation_id is not None:
            result = await self.db.execute(
                select(Conversation).where(
                    Conversation.id == conversation_id,
                    Conversation.created_by == user.id,
                )
            )
            conversation = result.scalar_one_or_none()
            if conversation is None:
                raise NotFoundError("Conversation")
            if conversation.problem_id is None and explicit_problem is not None:
                conversation.problem_id = explicit_problem.id
                await self.db.flush()
            return conversation

        conversation = Conversation(
            problem_id=explicit_problem.id if explicit_problem else None,
            created_by=user.id,
            title=conversation_title(message),
        )
        self.db.add(conversation)
        await self.db.flush()
        await self.db.refresh(conversation)
        logger.info("conversation_created", conversation_id=conversation.id)
        return conversation

    async def _get_message_history(self, conversation_id: int) -> list[dict]:
        result = await self.db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return [
            {"role": msg.role, "content": msg.content}
            for msg in result.scalars().all()
            if msg.role in ("user", "assistant")
        ]
