from oracle.commands.stages import (
    ORDER,
    STAGES,
    assess_readiness,
    detect_stage,
    next_stage,
    parse_stage,
)
from oracle.models import TeamStage


def test_every_stage_is_described():
    assert set(STAGES) == set(TeamStage)
    assert ORDER[0] == TeamStage.IDEATION
    assert ORDER[-1] == TeamStage.GROWTH


def test_parse_stage_defaults_to_ideation():
    assert parse_stage("Testing ") == TeamStage.TESTING
    assert parse_stage(None) == TeamStage.IDEATION
    assert parse_stage("hyperdrive") == TeamStage.IDEATION


def test_next_stage():
    assert next_stage(TeamStage.IDEATION) == TeamStage.DEVELOPMENT
    assert next_stage(TeamStage.GROWTH) is None


def test_detect_stage_favors_current_without_evidence():
    detected, confidence = detect_stage([], TeamStage.LAUNCH)

    assert detected == TeamStage.LAUNCH
    assert confidence == 0.7


def test_detect_stage_follows_keywords():
    contents = ["built the mvp prototype", "implement feature flags in code"]

    detected, confidence = detect_stage(contents, TeamStage.IDEATION)

    assert detected == TeamStage.DEVELOPMENT
    assert 0.5 < confidence <= 0.95


def test_readiness_requires_later_stage():
    ready = assess_readiness("ideation", ["build the mvp", "code the prototype", "implement a feature"])
    steady = assess_readiness("testing", ["user feedback"])
    backwards = assess_readiness("launch", ["idea problem research", "validate hypothesis with market research"])

    assert ready.ready and ready.next == TeamStage.DEVELOPMENT
    assert not steady.ready
    assert backwards.detected == TeamStage.IDEATION
    assert not backwards.ready


def test_growth_is_never_ready():
    readiness = assess_readiness("growth", ["launch marketing campaign sales acquire"] * 5)

    assert readiness.next is None
    assert not readiness.ready
