"""Team journey stages and keyword-based stage detection."""

from dataclasses import dataclass

from oracle.models import TeamStage


@dataclass(frozen=True)
class StageInfo:
    title: str
    description: str
    characteristics: tuple[str, ...]
    support_needed: tuple[str, ...]
    next_actions: tuple[str, ...]


STAGES: dict[TeamStage, StageInfo] = {
    TeamStage.IDEATION: StageInfo(
        title="Ideation & Discovery",
        description="Define and validate your product concept",
        characteristics=("Problem exploration", "Market research", "User interviews", "Concept validation"),
        support_needed=("Market research guidance", "User interview techniques", "Competitive analysis"),
        next_actions=(
            "Conduct customer interviews to validate problem",
            "Define target market and personas",
            "Test core assumptions with potential users",
        ),
    ),
    TeamStage.DEVELOPMENT: StageInfo(
        title="Development & MVP",
        description="Build your minimum viable product",
        characteristics=(
            "Core feature development",
            "Technical architecture",
            "Initial prototypes",
            "Basic functionality",
        ),
        support_needed=("Technical mentorship", "Architecture review", "MVP scoping"),
        next_actions=(
            "Build core MVP features",
            "Set up development infrastructure",
            "Create user testing plan",
        ),
    ),
    TeamStage.TESTING: StageInfo(
        title="Testing & Validation",
        description="Test and refine your product with users",
        characteristics=("User testing", "Feature refinement", "Performance optimization", "Bug fixing"),
        support_needed=("Testing methodologies", "User feedback analysis", "Quality assurance"),
        next_actions=(
            "Gather user feedback on MVP",
            "Analyze usage data and metrics",
            "Iterate based on learnings",
        ),
    ),
    TeamStage.LAUNCH: StageInfo(
        title="Launch & Go-to-Market",
        description="Launch your product and acquire users",
        characteristics=("Launch preparation", "Marketing strategy", "User acquisition", "Initial traction"),
        support_needed=("Launch strategy", "Marketing guidance", "PR and outreach"),
        next_actions=(
            "Execute go-to-market strategy",
            "Optimize customer acquisition channels",
            "Track key launch metrics",
        ),
    ),
    TeamStage.GROWTH: StageInfo(
        title="Growth & Scale",
        description="Scale your product and grow your user base",
        characteristics=("User growth", "Feature expansion", "Team scaling", "Process optimization"),
        support_needed=("Growth strategy", "Team scaling", "Metrics analysis"),
        next_actions=(
            "Scale proven acquisition channels",
            "Optimize unit economics",
            "Build operational systems",
        ),
    ),
}

ORDER: tuple[TeamStage, ...] = tuple(TeamStage)

KEYWORDS: dict[TeamStage, tuple[str, ...]] = {
    TeamStage.IDEATION: ("idea", "validate", "problem", "market", "customer", "research", "hypothesis"),
    TeamStage.DEVELOPMENT: ("build", "code", "feature", "mvp", "prototype", "develop", "implement"),
    TeamStage.TESTING: ("test", "feedback", "user", "iterate", "data", "analytics", "pivot"),
    TeamStage.LAUNCH: ("launch", "marketing", "customer", "acquire", "sales", "campaign"),
    TeamStage.GROWTH: ("scale", "growth", "optimize", "metrics", "revenue", "team"),
}

UPDATE_WEIGHT = 0.5
CURRENT_STAGE_WEIGHT = 2.0


def parse_stage(value: str | None) -> TeamStage:
    try:
        return TeamStage((value or "").strip().lower())
    except ValueError:
        return TeamStage.IDEATION


def next_stage(stage: TeamStage) -> TeamStage | None:
    index = ORDER.index(stage)
    return ORDER[index + 1] if index + 1 < len(ORDER) else None


@dataclass(frozen=True)
class Readiness:
    current: TeamStage
    detected: TeamStage
    confidence: float
    next: TeamStage | None

    @property
    def ready(self) -> bool:
        """Recent work already belongs to a later stage than the recorded one."""
        return self.next is not None and ORDER.index(self.detected) > ORDER.index(self.current)


def detect_stage(contents: list[str], current: TeamStage) -> tuple[TeamStage, float]:
    """Score update texts against stage keywords; the recorded stage gets a head start.

    Ties resolve to the earliest stage. Confidence is 0.5 plus a tenth of the
    winning score, capped at 0.95.
    """
    scores = {stage: 0.0 for stage in ORDER}
    scores[current] += CURRENT_STAGE_WEIGHT
    for content in contents:
        lowered = content.lower()
        for stage, words in KEYWORDS.items():
            scores[stage] += UPDATE_WEIGHT * sum(1 for word in words if word in lowered)

    best = max(scores.values())
    detected = next(stage for stage in ORDER if scores[stage] == best)
    return detected, min(0.95, 0.5 + best / 10)


def assess_readiness(stage: str | None, contents: list[str]) -> Readiness:
    current = parse_stage(stage)
    detected, confidence = detect_stage(contents, current)
    return Readiness(current=current, detected=detected, confidence=confidence, next=next_stage(current))
