"""Title similarity tests."""

import pytest

from synapse.services.similarity import content_words, share_stem, similarity


def test_identical_ignoring_case_and_whitespace():
    assert similarity("  Database Timeout ", "database timeout") == 1.0


def test_empty_string_is_a_substring_of_anything():
    assert similarity("", "anything") == 0.8
    assert similarity("anything", "   ") == 0.8
    assert similarity("", "  ") == 1.0


def test_substring_scores_fixed_value():
    assert similarity("bug in login", "bug in login page") == 0.8
    assert similarity("login", "login page crashes") == 0.8
    assert similarity("login page crashes", "login") == 0.8


def test_jaccard_over_content_words():
    # {slow, queries, reports} vs {slow, queries, dashboards}: 2 shared / 4 total
    score = similarity("slow queries in reports", "slow queries on dashboards")
    assert score == pytest.approx(0.5)


def test_stem_bonus_for_ing_and_s_pair():
    # no shared words, but "caching" / "layers" form an -ing / -s pair
    assert similarity("caching strategy", "layers explained") == pytest.approx(0.2)


def test_stem_bonus_for_prefix_pair():
    score = similarity("deploy pipeline", "deployment review")
    assert score == pytest.approx(0.2)


def test_disjoint_content_words_score_zero():
    # {how, fix, chat} vs {why, page, crash}
    assert similarity("how to fix the chat", "why does the page crash") == 0.0


def test_no_content_words_scores_zero():
    assert similarity("to be or", "it is an") == 0.0


def test_symmetric():
    a, b = "memory leak in worker", "worker memory growth"
    assert similarity(a, b) == similarity(b, a)


def test_score_is_clamped():
    assert similarity("builds failing tests", "build fails testing") <= 1.0


def test_content_words_drops_stop_words_and_short_tokens():
    assert content_words("The fix is in db layer") == {"fix", "layer"}


def test_share_stem():
    assert share_stem("index", "indexes")
    assert share_stem("running", "tests")
    assert not share_stem("cache", "queue")
