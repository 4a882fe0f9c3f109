"""
Presentation helpers for chat front ends.

The dispatch layer never truncates; front ends with message size limits
(Discord caps messages at 2000 characters) call these at their boundary.
"""

CHAT_MESSAGE_LIMIT = 2000

# How far back from the cut point a sentence/word boundary may be
BOUNDARY_WINDOW = 200

TRUNCATED_SENTENCE_SUFFIX = "\n\n*[Response truncated due to length]*"
TRUNCATED_SUFFIX = "...\n\n*[Response truncated]*"


def truncate_for_chat(text: str, max_length: int = CHAT_MESSAGE_LIMIT) -> str:
    """
    Shorten text to fit a chat message.

    Prefers cutting after the last full sentence, then at the last word
    boundary, and hard-cuts only when neither lies close to the limit.
    Texts within the limit are returned unchanged.
    """
    if len(text) <= max_length:
        return text

    window = text[: max_length - 100]
    last_period = window.rfind(".")
    last_space = window.rfind(" ")

    if last_period > max_length - BOUNDARY_WINDOW:
        return text[: last_period + 1] + TRUNCATED_SENTENCE_SUFFIX
    if last_space > max_length - BOUNDARY_WINDOW:
        return text[:last_space] + TRUNCATED_SUFFIX

    return text[: max_length - 50] + TRUNCATED_SUFFIX
