"""
Mock data for Benoît.

Scripted tutor replies served by the Gemini service when MOCK_MODE is on,
so the whole lesson / chat flow can be exercised without API keys.
Replies follow the tutor persona: short French sentences with the
Portuguese translation in parentheses.
"""

# Replies are picked by user turn number, wrapping around when exhausted.
MOCK_REPLIES = [
    "Bonjour ! Comment tu t'appelles ? 🤖 (Olá! Como você se chama?)",
    "Enchanté ! Tu habites où ? (Prazer! Onde você mora?)",
    "Ah, c'est une belle ville ! Tu aimes voyager ? (Ah, é uma cidade bonita! Você gosta de viajar?)",
    "Très bien ! Répète après moi : « J'adore voyager. » 🔋 (Muito bem! Repita comigo: Eu adoro viajar.)",
    "Excellent ! Tu parles déjà très bien. ⚙️ (Excelente! Você já fala muito bem.)",
]


def mock_reply(user_turns: int) -> str:
    """Scripted reply for the given 1-indexed user turn."""
    index = max(user_turns - 1, 0) % len(MOCK_REPLIES)
    return MOCK_REPLIES[index]
