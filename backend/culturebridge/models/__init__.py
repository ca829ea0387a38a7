"""Database models."""

from culturebridge.models.cultural_exchange import (
    CulturalExchange,
    CulturalExchangeLanguage,
    CulturalExchangeParticipant,
    ExchangeStatus,
    ParticipantRole,
)
from culturebridge.models.learning_progress import (
    UserAchievement,
    UserLanguageProgress,
    UserLearningProgress,
)
from culturebridge.models.learning_session import (
    ExerciseResult,
    ExerciseType,
    LearningExercise,
    LearningSession,
    ProficiencyLevel,
    SessionStatus,
    SessionType,
)
from culturebridge.models.ledger import (
    TokenTransaction,
    TransactionStatus,
    TransactionType,
    UserWallet,
)

__all__ = [
    "CulturalExchange",
    "CulturalExchangeLanguage",
    "CulturalExchangeParticipant",
    "ExchangeStatus",
    "ParticipantRole",
    "UserAchievement",
    "UserLanguageProgress",
    "UserLearningProgress",
    "ExerciseResult",
    "ExerciseType",
    "LearningExercise",
    "LearningSession",
    "ProficiencyLevel",
    "SessionStatus",
    "SessionType",
    "TokenTransaction",
    "TransactionStatus",
    "TransactionType",
    "UserWallet",
]
