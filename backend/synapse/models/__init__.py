"""SQLAlchemy models."""

from synapse.models.base import Base
from synapse.models.contribution import Artifact, Conjecture, Criticism
from synapse.models.conversation import Conversation, Message
from synapse.models.problem import Problem, ProblemCollaborator
from synapse.models.user import User

__all__ = [
    "Base",
    "User",
    "Problem",
    "ProblemCollaborator",
    "Conversation",
    "Message",
    "Conjecture",
    "Criticism",
    "Artifact",
]
