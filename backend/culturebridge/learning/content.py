"""Learning content templates and exercise generation."""

from dataclasses import dataclass, field
from typing import Any

from culturebridge.core.app_exceptions import InputValidationError
from culturebridge.models.learning_session import ExerciseType, ProficiencyLevel, SessionType


@dataclass
class ExerciseContent:
    """One generated or custom exercise."""

    exercise_type: ExerciseType
    points: int
    question: str
    correct_answer: str
    options: list[str] | None = None
    explanation: str | None = None


@dataclass
class SessionContent:
    """Title, materials and exercises for a new session."""

    title: str
    description: str
    materials: list[dict[str, Any]] = field(default_factory=list)
    exercises: list[ExerciseContent] = field(default_factory=list)


@dataclass(frozen=True)
class SessionTemplate:
    title: str
    description: str
    exercises: tuple[tuple[ExerciseType, int], ...]  # (type, points)


LEARNING_TEMPLATES: dict[SessionType, SessionTemplate] = {
    SessionType.VOCABULARY: SessionTemplate(
        "Vocabulary",
        "Learn common words and phrases",
        (
            (ExerciseType.MULTIPLE_CHOICE, 1),
            (ExerciseType.FILL_BLANK, 2),
            (ExerciseType.TRANSLATION, 3),
        ),
    ),
    SessionType.GRAMMAR: SessionTemplate(
        "Grammar",
        "Master grammar rules and usage",
        ((ExerciseType.MULTIPLE_CHOICE, 2), (ExerciseType.FILL_BLANK, 3)),
    ),
    SessionType.CONVERSATION: SessionTemplate(
        "Conversation practice",
        "Practice real-life dialogue",
        ((ExerciseType.CONVERSATION, 5), (ExerciseType.PRONUNCIATION, 3)),
    ),
    SessionType.CULTURAL_CONTEXT: SessionTemplate(
        "Cultural context",
        "Understand the culture behind the language",
        ((ExerciseType.MULTIPLE_CHOICE, 2),),
    ),
    SessionType.PRONUNCIATION: SessionTemplate(
        "Pronunciation",
        "Train sounds, stress and intonation",
        ((ExerciseType.PRONUNCIATION, 3), (ExerciseType.PRONUNCIATION, 3)),
    ),
    SessionType.LISTENING: SessionTemplate(
        "Listening",
        "Understand spoken language",
        ((ExerciseType.LISTENING, 2), (ExerciseType.MULTIPLE_CHOICE, 1)),
    ),
    SessionType.READING: SessionTemplate(
        "Reading",
        "Read and understand short texts",
        ((ExerciseType.READING, 3), (ExerciseType.MULTIPLE_CHOICE, 1)),
    ),
    SessionType.WRITING: SessionTemplate(
        "Writing",
        "Write short texts with correct grammar",
        ((ExerciseType.WRITING, 4), (ExerciseType.TRANSLATION, 3)),
    ),
}


def generate_materials(
    session_type: SessionType, target_language: str, level: ProficiencyLevel
) -> list[dict[str, Any]]:
    """Study materials shown before the exercises."""
    level_name = level.value
    if session_type == SessionType.VOCABULARY:
        return [
            {
                "type": "TEXT",
                "content": f"{target_language} {level_name} vocabulary list",
                "metadata": {"category": "vocabulary_list"},
            }
        ]
    if session_type == SessionType.GRAMMAR:
        return [
            {
                "type": "TEXT",
                "content": f"{target_language} {level_name} grammar rules",
                "metadata": {"category": "grammar_rules"},
            }
        ]
    if session_type in (SessionType.CONVERSATION, SessionType.LISTENING):
        return [
            {
                "type": "AUDIO",
                "content": "Sample conversation audio",
                "url": f"/audio/conversations/{target_language}/{level_name}/sample.mp3",
                "metadata": {"duration": 120, "speakers": 2},
            }
        ]
    if session_type in (SessionType.CULTURAL_CONTEXT, SessionType.READING):
        return [
            {
                "type": "TEXT",
                "content": f"{target_language} {level_name} cultural background",
                "metadata": {"category": "cultural_background"},
            }
        ]
    return []


def create_exercise(
    exercise_type: ExerciseType,
    points: int,
    target_language: str,
    native_language: str,
    index: int,
) -> ExerciseContent:
    """Generate a prompt/answer pair for one exercise slot."""
    if exercise_type == ExerciseType.MULTIPLE_CHOICE:
        return ExerciseContent(
            exercise_type=exercise_type,
            points=points,
            question=f"Choose the correct {target_language} translation ({index + 1})",
            options=["Option A", "Option B", "Option C", "Option D"],
            correct_answer="Option A",
            explanation="Option A is the literal translation",
        )
    if exercise_type == ExerciseType.FILL_BLANK:
        return ExerciseContent(
            exercise_type=exercise_type,
            points=points,
            question=f"Fill in the {target_language} word: Hello, ___ are you?",
            correct_answer="how",
            explanation="The question word 'how' fits here",
        )
    if exercise_type == ExerciseType.TRANSLATION:
        return ExerciseContent(
            exercise_type=exercise_type,
            points=points,
            question=f"Translate from {native_language} to {target_language}: Nice to meet you",
            correct_answer="Hello, nice to meet you",
            explanation="A standard greeting",
        )
    if exercise_type == ExerciseType.PRONUNCIATION:
        return ExerciseContent(
            exercise_type=exercise_type,
            points=points,
            question="Pronounce the word: Hello",
            correct_answer="/həˈloʊ/",
            explanation="Stress falls on the second syllable",
        )
    if exercise_type == ExerciseType.CONVERSATION:
        return ExerciseContent(
            exercise_type=exercise_type,
            points=points,
            question=f"At a restaurant, how do you order a coffee in {target_language}?",
            correct_answer="I would like a cup of coffee",
            explanation="A polite way to order",
        )
    if exercise_type == ExerciseType.LISTENING:
        return ExerciseContent(
            exercise_type=exercise_type,
            points=points,
            question="What does the speaker order in the recording?",
            correct_answer="coffee",
        )
    if exercise_type == ExerciseType.READING:
        return ExerciseContent(
            exercise_type=exercise_type,
            points=points,
            question="Which city is the text about?",
            correct_answer="Beijing",
        )
    return ExerciseContent(
        exercise_type=exercise_type,
        points=points,
        question=f"Write one sentence in {target_language} introducing yourself",
        correct_answer="My name is Li",
    )


def generate_learning_content(
    session_type: SessionType,
    target_language: str,
    native_language: str,
    level: ProficiencyLevel,
) -> SessionContent:
    """
    Build session content from the template for a session type.

    Raises:
        InputValidationError: No template exists for the session type
    """
    template = LEARNING_TEMPLATES.get(session_type)
    if template is None:
        raise InputValidationError(
            f"Unsupported session type: {session_type}",
            {"session_type": str(session_type)},
        )
    return SessionContent(
        title=template.title,
        description=template.description,
        materials=generate_materials(session_type, target_language, level),
        exercises=[
            create_exercise(exercise_type, points, target_language, native_language, index)
            for index, (exercise_type, points) in enumerate(template.exercises)
        ],
    )
