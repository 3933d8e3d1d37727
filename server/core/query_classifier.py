"""Heuristic split of free-text queries into natural-language questions and keyword phrases."""

from enum import Enum

QUESTION_WORDS = ("what", "who", "when", "where", "which", "why", "how", "can", "does", "is", "are")
QUESTION_PHRASES = ("tell me", "show me", "find", "search for", "looking for")


class QueryKind(str, Enum):
    NATURAL_LANGUAGE = "natural-language"
    KEYWORD = "keyword"


def classify(query: str) -> QueryKind:
    """Classify a query as a natural-language question or a keyword phrase.

    A query is natural language if, ignoring case and surrounding whitespace, it
    starts with a question word followed by a space or "'s ", ends with "?", or
    contains one of QUESTION_PHRASES anywhere.

    Args:
        query (str): The raw query.

    Returns:
        QueryKind: NATURAL_LANGUAGE or KEYWORD.
    """
    lower_query = query.lower().strip()

    starts_with_question_word = any(
        lower_query.startswith(f"{word} ") or lower_query.startswith(f"{word}'s ")
        for word in QUESTION_WORDS
    )
    ends_with_question_mark = lower_query.endswith("?")
    contains_question_phrase = any(phrase in lower_query for phrase in QUESTION_PHRASES)

    if starts_with_question_word or ends_with_question_mark or contains_question_phrase:
        return QueryKind.NATURAL_LANGUAGE
    return QueryKind.KEYWORD
