"""
Decision extraction from free-text model output.

A response may mention both words ("not the SAME, they are DIFFERENT"), so a
line that starts with a decision word is authoritative and substring position
is only a fallback. When nothing matches, the answer is DIFFERENT: an unclear
response must never merge two entities.
"""

from .models import Decision

FALLBACK_WINDOW = 100


def parse_decision(text: str) -> Decision:
    """
    Turn raw completion text into a Decision. Never raises.

    1. First stripped line starting with SAME or DIFFERENT (case-insensitive) wins.
    2. Otherwise, whichever word occurs first in the first 100 characters.
    3. Otherwise DIFFERENT.
    """
    for line in text.split("\n"):
        upper = line.strip().upper()
        if upper.startswith(Decision.SAME.value):
            return Decision.SAME
        if upper.startswith(Decision.DIFFERENT.value):
            return Decision.DIFFERENT

    window = text[:FALLBACK_WINDOW].upper()
    same_pos = window.find(Decision.SAME.value)
    diff_pos = window.find(Decision.DIFFERENT.value)

    if same_pos >= 0 and (diff_pos < 0 or same_pos < diff_pos):
        return Decision.SAME
    if diff_pos >= 0:
        return Decision.DIFFERENT
    return Decision.DIFFERENT
