"""Problem and collaborator models."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from synapse.models.base import Base, TimestampMixin

PROBLEM_STATUSES = ("open", "in_progress", "resolved")
PROBLEM_PRIORITIES = ("low", "medium", "high")


class Problem(Base, TimestampMixin):
    __tablename__ = "problems"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open", server_default="open")
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium", server_default="medium")
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    owner = relationship("User", back_populates="problems")
    collaborators = relationship("ProblemCollaborator", back_populates="problem", lazy="select")


class ProblemCollaborator(Base, TimestampMixin):
    __tablename__ = "problem_collaborators"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    problem_id: Mapped[int] = mapped_column(
        ForeignKey("problems.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="owner")

    problem = relationship("Problem", back_populates="collaborators")
