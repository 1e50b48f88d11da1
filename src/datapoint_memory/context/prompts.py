"""Prompts for answering questions from datapoint context."""

ANSWER_SYSTEM_PROMPT = (
    "Du bist ein Smart Home Assistent mit Zugriff auf ioBroker Datenpunkt-Informationen. "
    "Beantworte Benutzerfragen basierend auf dem bereitgestellten Kontext. "
    "Sei präzise und hilfreich. Falls der Kontext keine relevanten Informationen enthält, "
    "sage das klar."
)

ANSWER_USER_PROMPT = """Kontext:
{context}

Frage: {query}

Antwort:"""

FALLBACK_ANSWER = "Basierend auf den verfügbaren Smart Home Daten: {context}"

NOT_FOUND_ANSWER = (
    'Es tut mir leid, ich konnte keine relevanten Informationen zu Ihrer Frage "{query}" finden.'
)
