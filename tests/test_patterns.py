"""Tests for pattern aggregation over a rated corpus."""

import pytest

from tests.factories import make_screenplay, rated_script
from vesper.analysis import PatternAggregator
from vesper.config import AnalysisConfig
from vesper.models import PatternType, Performance
from vesper.parser import parse_script

pytestmark = pytest.mark.unit

SHORT_TWO_SCENES = make_screenplay(
    [
        ("INT. A - DAY", [("ANNA", "Hello there friend.")]),
        ("EXT. B - NIGHT", [("BORIS", "No.")]),
    ]
)
SHORT_ONE_SCENE = make_screenplay([("INT. C - DAY", [("CARL", "Well.")])])


@pytest.fixture
def corpus(memory_store, sample_text):
    """Two successful scripts, one unsuccessful and one unrated."""
    scripts = [
        (rated_script("Alpha", 8.0, ["Drama", "Thriller"], page_count=110), sample_text),
        (rated_script("Beta", 7.5, ["Drama"], page_count=100), SHORT_TWO_SCENES),
        (rated_script("Gamma", 5.0, ["Comedy"], page_count=90), SHORT_ONE_SCENE),
        (rated_script("Delta", None, ["Drama"]), sample_text),
    ]
    stored = {}
    for script, text in scripts:
        script = memory_store.add_script(script)
        memory_store.save_parse_result(script.id, parse_script(text))
        stored[script.title] = script
    memory_store.save_performances(
        stored["Alpha"].id,
        [
            Performance(
                script_id=stored["Alpha"].id,
                actor_name="Famous Actor",
                role_type="lead",
                oscar_wins=2,
            ),
            Performance(
                script_id=stored["Alpha"].id,
                actor_name="New Face",
                role_type="supporting",
            ),
        ],
    )
    return memory_store


def by_name(report):
    return {p.pattern_name: p for p in report.patterns}


def test_cohorts(corpus):
    report = PatternAggregator(corpus).run()
    assert report.successful_count == 2
    assert report.unsuccessful_count == 1


def test_every_category_is_reported(corpus):
    report = PatternAggregator(corpus).run()
    grouped = report.by_type()

    assert len(grouped["structure"]) == 2
    assert len(grouped["dialogue"]) == 2
    assert len(grouped["character"]) == 1
    assert len(grouped["beat_timing"]) == 7
    assert len(grouped["genre"]) == 2
    assert len(grouped["casting"]) == 1
    assert len(corpus.list_patterns()) == 15


def test_structure_patterns(corpus):
    patterns = by_name(PatternAggregator(corpus).run())

    scenes = patterns["Optimal Scene Count"]
    assert scenes.description == (
        "Successful scripts average 2.5 scenes vs 1.0 in less successful ones"
    )
    assert scenes.success_correlation_score == pytest.approx(1.5 / 1.75)
    assert scenes.found_in_successful_scripts == 2
    assert scenes.found_in_unsuccessful_scripts == 1

    pages = patterns["Optimal Page Count"]
    assert pages.description == "Successful scripts average 105.0 pages"
    assert pages.success_correlation_score == 0.7


def test_dialogue_patterns(corpus):
    patterns = by_name(PatternAggregator(corpus).run())

    assert patterns["Optimal Line Length"].description == (
        "Successful scripts have dialogue averaging 4.1 words per line (vs 1.0)"
    )
    assert patterns["Tone Balance"].description == (
        "Most successful scripts lean neutral (3 lines)"
    )


def test_character_and_beat_patterns(corpus):
    patterns = by_name(PatternAggregator(corpus).run())

    assert patterns["Optimal Character Count"].description == (
        "Successful scripts average 2.0 distinct characters"
    )
    assert "Winning Archetype" not in patterns

    midpoint = patterns["Midpoint Timing"]
    assert midpoint.pattern_type is PatternType.BEAT_TIMING
    assert midpoint.found_in_successful_scripts == 2
    assert midpoint.description == (
        "Midpoint typically occurs at page 1.0 in successful scripts"
    )
    assert patterns["Opening Image Timing"].found_in_successful_scripts == 1


def test_genre_patterns(corpus):
    patterns = by_name(PatternAggregator(corpus).run())

    drama = patterns["Drama Success Rate"]
    assert drama.found_in_successful_scripts == 2
    assert drama.genres == ["drama"]
    thriller = patterns["Thriller Success Rate"]
    assert thriller.description == "Thriller scripts average 8.0 rating (1 successful scripts)"
    assert "Comedy Success Rate" not in patterns


def test_genre_limit(corpus):
    report = PatternAggregator(corpus, AnalysisConfig(top_genre_limit=1)).run()
    assert [p.pattern_name for p in report.by_type()["genre"]] == ["Drama Success Rate"]


def test_casting_pattern(corpus):
    casting = by_name(PatternAggregator(corpus).run())["Award-Winning Cast Effect"]
    assert casting.description == (
        "Scripts with award-winning actors average 8.0 rating (1 performances)"
    )
    assert casting.found_in_successful_scripts == 1


def test_scores_are_bounded(corpus):
    for pattern in PatternAggregator(corpus).run().patterns:
        assert 0.0 <= pattern.success_correlation_score <= 1.0


def test_threshold_moves_the_cohorts(corpus):
    report = PatternAggregator(corpus, AnalysisConfig(success_threshold=7.8)).run()
    assert report.successful_count == 1
    assert report.unsuccessful_count == 2


def test_rerun_is_idempotent(corpus):
    aggregator = PatternAggregator(corpus)
    aggregator.run()
    first = [p.model_dump(exclude={"updated_at"}) for p in corpus.list_patterns()]
    aggregator.run()
    second = [p.model_dump(exclude={"updated_at"}) for p in corpus.list_patterns()]
    assert first == second


def test_empty_corpus(memory_store):
    report = PatternAggregator(memory_store).run()
    assert report.patterns == []
    assert report.successful_count == 0
    assert memory_store.list_patterns() == []


def test_no_successful_scripts(memory_store):
    script = memory_store.add_script(rated_script("Flop", 3.0, ["Drama"]))
    memory_store.save_parse_result(script.id, parse_script(SHORT_ONE_SCENE))

    report = PatternAggregator(memory_store).run()
    assert report.successful_count == 0
    assert report.unsuccessful_count == 1
    assert report.patterns == []
