"""
Wire schema for stored progress.

Mirrors the durable part of LearningProgress with camelCase keys. Missing keys
fall back to defaults; anything else malformed fails validation.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from finesse_trainer.domain.models import LearningProgress, MasteryCard, SessionRecord


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MasteryCardModel(_Wire):
    pattern_id: str = Field(alias="patternId")
    easiness: float = Field(ge=1.3)
    interval: int = Field(ge=1)
    repetitions: int = Field(ge=0)
    success_count: int = Field(alias="successCount", ge=0)
    fail_count: int = Field(alias="failCount", ge=0)
    last_reviewed_at: int = Field(alias="lastReviewedAt")
    next_due_at: int = Field(alias="nextDueAt")

    def to_domain(self) -> MasteryCard:
        return MasteryCard(**self.model_dump())

    @classmethod
    def from_domain(cls, card: MasteryCard) -> "MasteryCardModel":
        return cls(
            pattern_id=card.pattern_id,
            easiness=card.easiness,
            interval=card.interval,
            repetitions=card.repetitions,
            success_count=card.success_count,
            fail_count=card.fail_count,
            last_reviewed_at=card.last_reviewed_at,
            next_due_at=card.next_due_at,
        )


class SessionRecordModel(_Wire):
    timestamp: int
    total_attempts: int = Field(alias="totalAttempts", ge=0)
    correct_attempts: int = Field(alias="correctAttempts", ge=0)
    accuracy: float
    patterns_reviewed: int = Field(alias="patternsReviewed", ge=0)
    new_patterns_mastered: int = Field(alias="newPatternsMastered", ge=0)

    def to_domain(self) -> SessionRecord:
        return SessionRecord(**self.model_dump())


class ProgressPayload(_Wire):
    cards: dict[str, MasteryCardModel] = Field(default_factory=dict)
    session_history: list[SessionRecordModel] = Field(
        default_factory=list, alias="sessionHistory"
    )
    global_repetition_count: int = Field(default=0, alias="globalRepetitionCount", ge=0)
    last_mastered_review_at: int = Field(default=0, alias="lastMasteredReviewAt", ge=0)

    @model_validator(mode="after")
    def check_card_keys(self) -> "ProgressPayload":
        for key, card in self.cards.items():
            if card.pattern_id != key:
                raise ValueError(f"Card stored under {key} has pattern id {card.pattern_id}")
        return self

    def to_domain(self) -> LearningProgress:
        return LearningProgress(
            cards={pid: card.to_domain() for pid, card in self.cards.items()},
            session_history=tuple(r.to_domain() for r in self.session_history),
            global_repetition_count=self.global_repetition_count,
            last_mastered_review_at=self.last_mastered_review_at,
        )

    @classmethod
    def from_domain(cls, progress: LearningProgress) -> "ProgressPayload":
        return cls(
            cards={pid: MasteryCardModel.from_domain(c) for pid, c in progress.cards.items()},
            session_history=[
                SessionRecordModel(
                    timestamp=r.timestamp,
                    total_attempts=r.total_attempts,
                    correct_attempts=r.correct_attempts,
                    accuracy=r.accuracy,
                    patterns_reviewed=r.patterns_reviewed,
                    new_patterns_mastered=r.new_patterns_mastered,
                )
                for r in progress.session_history
            ],
            global_repetition_count=progress.global_repetition_count,
            last_mastered_review_at=progress.last_mastered_review_at,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
