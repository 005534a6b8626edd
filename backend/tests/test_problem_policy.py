"""Problem creation policy and title synthesis tests."""

from synapse.services.problem_policy import (
    creation_signals,
    should_create_problem,
    synthesize_title,
)


def test_signals():
    assert creation_signals("hi", is_first_message=False) == []
    assert creation_signals("hi", is_first_message=True) == ["first_message"]
    assert creation_signals("Why is the build broken?", is_first_message=False) == [
        "keyword",
        "long_message",
        "question_mark",
    ]


def test_zero_threshold_always_creates():
    assert should_create_problem("ok", is_first_message=False, min_signals=0)


def test_threshold_counts_signals():
    assert not should_create_problem("ok", is_first_message=False, min_signals=1)
    assert should_create_problem("ok", is_first_message=True, min_signals=1)
    assert not should_create_problem("ok", is_first_message=True, min_signals=2)


def test_title_from_significant_words():
    title = synthesize_title("My database queries keep timing out after the upgrade")
    assert title == "database queries keep timing after upgrade"
    assert synthesize_title("please help: nightly backups silently stopped running yesterday") == (
        "please help: nightly backups silently stopped..."
    )


def test_title_keeps_first_six_significant_words():
    title = synthesize_title("The export button is completely broken and nothing happens when clicked")
    assert title == "export button completely broken nothing happens..."


def test_title_without_ellipsis_when_few_words():
    assert synthesize_title("the cache is stale") == "cache stale"


def test_title_fallback_to_message():
    assert synthesize_title("a b c") == "a b c"
    long_short_words = "ab " * 40
    assert synthesize_title(long_short_words) == long_short_words[:80] + "..."
