"""
Moderation Service - Keyword based content moderation

- Hard block: text containing a profanity term is rejected outright.
- Soft flag: text containing a political keyword is allowed but flagged
  for moderator review.
"""
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple

from community_circle.db.models import FlagRule

logger = logging.getLogger(__name__)


PROFANITY_LIST: Tuple[str, ...] = (
    "fuck",
    "shit",
    "ass",
    "bitch",
    "damn",
    "cunt",
    "dick",
    "piss",
    "cock",
    "bastard",
    "slut",
    "whore",
    "nigger",
    "nigga",
    "faggot",
    "retard",
    "motherfucker",
    "asshole",
    "bullshit",
    "horseshit",
    "dumbass",
    "jackass",
    "shithead",
    "fuckface",
    "dickhead",
)

POLITICAL_KEYWORDS: Tuple[str, ...] = (
    "democrat",
    "republican",
    "liberal",
    "conservative",
    "trump",
    "biden",
    "maga",
    "woke",
    "antifa",
    "socialism",
    "communism",
    "fascism",
    "leftist",
    "right-wing",
    "left-wing",
    "alt-right",
    "marxist",
    "capitalist",
    "pro-life",
    "pro-choice",
    "gun control",
    "second amendment",
    "immigration ban",
    "defund the police",
    "blue lives matter",
    "black lives matter",
    "all lives matter",
    "crt",
    "critical race theory",
    "election fraud",
    "stolen election",
)


@dataclass(frozen=True)
class ModerationResult:
    blocked: bool = False
    block_reason: Optional[str] = None
    flagged: bool = False
    flag_rule: Optional[FlagRule] = None


def _compile(words: Iterable[str]) -> List[Tuple[str, Pattern]]:
    return [
        (word, re.compile(rf"\b{re.escape(word.lower())}\b", re.IGNORECASE))
        for word in words
    ]


class ModerationService:
    """Stateless classifier over free text"""

    def __init__(
        self,
        profanity: Iterable[str] = PROFANITY_LIST,
        political_keywords: Iterable[str] = POLITICAL_KEYWORDS
    ):
        self._profanity = _compile(profanity)
        self._political = _compile(political_keywords)

    def classify(self, text: str) -> ModerationResult:
        """
        Classify text against the moderation rules.

        Profanity is checked first and wins: a blocked text is never also
        flagged. Matching is whole-word and case-insensitive, so "classic"
        does not match "ass". The first match in list order is reported.
        """
        normalised = (text or "").lower()

        for word, pattern in self._profanity:
            if pattern.search(normalised):
                return ModerationResult(
                    blocked=True,
                    block_reason=f'Content contains prohibited language: "{word}"'
                )

        for _keyword, pattern in self._political:
            if pattern.search(normalised):
                return ModerationResult(flagged=True, flag_rule=FlagRule.POLITICS)

        return ModerationResult()


# Singleton instance
moderation_service = ModerationService()
