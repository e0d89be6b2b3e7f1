"""
Static tutor content for Benoît.

Lesson catalog, the tutor persona prompt, greetings and fallback text.
This is configuration data: loaded once, never mutated at runtime.
"""

from benoit.models import Lesson, LessonLevel

# ---------------------------------------------------------------------------
# Lesson catalog
# ---------------------------------------------------------------------------

LESSONS: tuple[Lesson, ...] = (
    Lesson(
        id="l1",
        title="Saudações & Apresentações",
        level=LessonLevel.BEGINNER,
        description='Aprenda a dizer "Bonjour" e se apresentar corretamente.',
        icon="👋",
    ),
    Lesson(
        id="l2",
        title="No Restaurante",
        level=LessonLevel.BEGINNER,
        description="Como pedir um croissant e um café au lait sem medo.",
        icon="☕",
    ),
    Lesson(
        id="l3",
        title="Direções & Viagem",
        level=LessonLevel.INTERMEDIATE,
        description="Encontre o caminho para a Torre Eiffel!",
        icon="📍",
    ),
    Lesson(
        id="l4",
        title="Falando sobre Hobbies",
        level=LessonLevel.INTERMEDIATE,
        description="Fale sobre o que você gosta de fazer no tempo livre.",
        icon="🎨",
    ),
)

_LESSONS_BY_ID = {lesson.id: lesson for lesson in LESSONS}


def get_lesson(lesson_id: str) -> Lesson | None:
    """Look up a lesson by id, or None if the catalog has no such lesson."""
    return _LESSONS_BY_ID.get(lesson_id)


# ---------------------------------------------------------------------------
# Tutor persona
# ---------------------------------------------------------------------------

SYSTEM_INSTRUCTION = (
    'Você é "Benoît", um robô amigável e entusiasmado que ensina francês.\n'
    "Suas regras:\n"
    "1. Responda primariamente em francês, mas sempre forneça a tradução em português "
    "entre parênteses para frases complexas.\n"
    "2. Seja pedagógico: se o usuário errar, corrija gentilmente.\n"
    "3. Use emojis de robô (🤖, ⚙️, 🔋) ocasionalmente.\n"
    "4. Mantenha as respostas curtas e focadas na conversa.\n"
    "5. Se estiver em uma lição específica, foque no vocabulário dessa lição.\n"
    "6. Incentive o usuário a repetir frases."
)

FREE_CHAT_CONTEXT = "Conversa livre em francês."

FREE_CHAT_GREETING = (
    "Bonjour ! Je suis Benoît. Vamos conversar um pouco em francês? "
    "Sobre o que você quer falar hoje? 🤖✨"
)

# Shown when the model answers but the candidate text is empty
FALLBACK_REPLY = "Désolé, j'ai un bug! 🤖 (Desculpe, eu tive um erro!)"

# Prefix asking the speech model for a friendly voice
SPEECH_DIRECTIVE = "Dites avec uma voz amicale et claire : "


def lesson_context(lesson: Lesson | None) -> str:
    """Sentence telling the tutor which lesson (if any) is running."""
    if lesson is None:
        return FREE_CHAT_CONTEXT
    return f'Atenção: Estamos na lição "{lesson.title}". O objetivo é {lesson.description}.'


def lesson_greeting(lesson: Lesson) -> str:
    return (
        f"Salut ! Enchanté ! 🤖 Hoje vamos começar a lição: **{lesson.title}**. "
        "Você está pronto? (Vous êtes prêt ?)"
    )


def build_system_instruction(context: str) -> str:
    return f"{SYSTEM_INSTRUCTION}\n\nContexto Atual: {context}"
