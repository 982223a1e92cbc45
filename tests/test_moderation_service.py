import pytest

from community_circle.db.models import FlagRule
from community_circle.services.moderation_service import ModerationService, moderation_service


def test_clean_text_passes():
    result = moderation_service.classify("Toddler story time at the library")
    assert not result.blocked
    assert not result.flagged
    assert result.block_reason is None
    assert result.flag_rule is None


@pytest.mark.parametrize("text", [
    "Classic craft session",
    "Bring a class snack",
    "Assemble at the gate",
    "Scunthorpe-free zone",
])
def test_substrings_do_not_match(text):
    assert not moderation_service.classify(text).blocked


@pytest.mark.parametrize("text", ["What the DAMN", "damn it", "Damn."])
def test_profanity_is_blocked_case_insensitively(text):
    result = moderation_service.classify(text)
    assert result.blocked
    assert result.block_reason == 'Content contains prohibited language: "damn"'
    assert not result.flagged


def test_political_keyword_is_flagged():
    result = moderation_service.classify("Republican picnic for families")
    assert not result.blocked
    assert result.flagged
    assert result.flag_rule == FlagRule.POLITICS


def test_multi_word_keyword_is_flagged():
    assert moderation_service.classify("A talk on gun control at the park").flagged


def test_profanity_wins_over_politics():
    result = moderation_service.classify("damn republican picnic")
    assert result.blocked
    assert not result.flagged
    assert result.flag_rule is None


def test_first_match_in_list_order_is_reported():
    result = moderation_service.classify("shit and fuck")
    assert result.block_reason == 'Content contains prohibited language: "fuck"'


def test_word_lists_are_injectable():
    service = ModerationService(profanity=["heck"], political_keywords=["tabs"])
    assert service.classify("what the heck").blocked
    assert service.classify("tabs versus spaces").flagged
    assert not service.classify("damn").blocked


def test_empty_text():
    result = moderation_service.classify("")
    assert not result.blocked and not result.flagged
