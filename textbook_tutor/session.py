"""
Session state - Preferences, credentials, and the per-user study session.

A StudySession is passed explicitly to every pipeline call instead of living
in module-level state, so two users never see each other's index or settings.
"""

from dataclasses import dataclass, field

from textbook_tutor.config import (
    DEFAULT_COMPLEXITY_LEVEL,
    DEFAULT_LEARNING_STYLE,
    GROQ_API_KEY,
    LLM_PROVIDER,
)


@dataclass(frozen=True)
class Preferences:
    """
    Learner-chosen knobs that shape every generated answer.

    Attributes:
        learning_style: Visual, Auditory, Read/Write, Kinesthetic, or Balanced
        complexity_level: Beginner, Intermediate, Advanced, or Expert
        include_examples: Ask the model for worked examples
        include_analogies: Ask the model for analogies
        include_questions: Ask the model for practice questions
    """
    learning_style: str = DEFAULT_LEARNING_STYLE
    complexity_level: str = DEFAULT_COMPLEXITY_LEVEL
    include_examples: bool = True
    include_analogies: bool = False
    include_questions: bool = False


@dataclass(frozen=True)
class Credentials:
    """Which LLM provider to call and the key to call it with."""
    api_key: str = ""
    provider: str = LLM_PROVIDER

    @classmethod
    def from_config(cls) -> "Credentials":
        """Build credentials from server-side configuration."""
        return cls(api_key=GROQ_API_KEY, provider=LLM_PROVIDER)

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return f"Credentials(provider={self.provider!r}, api_key={masked!r})"


@dataclass
class StudySession:
    """
    Everything one learner has built up so far.

    Attributes:
        index_location: Directory of the active vector index (None until a
            document has been processed)
        uploaded_files: Names of files ingested into the active index
        preferences: Current answer preferences
        model_name: LLM model chosen by the learner (provider default if None)
    """
    index_location: str | None = None
    uploaded_files: list[str] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)
    model_name: str | None = None

    @property
    def has_index(self) -> bool:
        """Check whether a document has been processed in this session."""
        return self.index_location is not None
