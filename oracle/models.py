from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from oracle.errors import ErrorKind


class Role(str, Enum):
    BUILDER = "builder"
    MENTOR = "mentor"
    LEAD = "lead"
    GUEST = "guest"
    UNASSIGNED = "unassigned"

    @classmethod
    def parse(cls, value: "Role | str | None") -> "Role | None":
        if isinstance(value, Role):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None

    @property
    def plural(self) -> str:
        return f"{self.value}s"

    @classmethod
    def from_plural(cls, keyword: str) -> "Role | None":
        keyword = keyword.strip().lower()
        for role in MESSAGEABLE_ROLES:
            if role.plural == keyword:
                return role
        return None


MESSAGEABLE_ROLES = (Role.BUILDER, Role.MENTOR, Role.LEAD, Role.GUEST)


class Capability(str, Enum):
    VIEW_TEAM_DATA = "viewTeamData"
    EDIT_OWN_PROGRESS = "editOwnProgress"
    SEND_MESSAGES = "sendMessages"
    SEND_BROADCASTS = "sendBroadcasts"
    VIEW_ALL_TEAMS = "viewAllTeams"
    EDIT_ANY_TEAM = "editAnyTeam"
    RUN_ANALYSIS = "runAnalysis"


class TeamStage(str, Enum):
    IDEATION = "ideation"
    DEVELOPMENT = "development"
    TESTING = "testing"
    LAUNCH = "launch"
    GROWTH = "growth"


class UpdateType(str, Enum):
    DAILY = "daily"
    MILESTONE = "milestone"
    MENTOR_MEETING = "mentor_meeting"


class Origin(str, Enum):
    USER = "user"
    HANDLER = "handler"
    SYSTEM = "system"
    REALTIME = "realtime"


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role | str
    team_id: str | None = None
    name: str | None = None


@dataclass
class Profile:
    id: str
    full_name: str
    role: str = Role.UNASSIGNED.value
    team_id: str | None = None
    skills: list[str] = field(default_factory=list)
    bio: str | None = None
    created_at: str | None = None

    def as_actor(self) -> Actor:
        return Actor(
            id=self.id,
            role=Role.parse(self.role) or Role.UNASSIGNED,
            team_id=self.team_id,
            name=self.full_name,
        )


@dataclass
class Team:
    id: str
    name: str
    stage: str = TeamStage.IDEATION.value
    description: str | None = None
    created_at: str | None = None


@dataclass
class Update:
    id: str
    team_id: str
    content: str
    created_by: str
    type: str = UpdateType.DAILY.value
    created_at: str | None = None


@dataclass
class TeamStatus:
    team_id: str
    current_status: str | None = None
    last_update: str | None = None
    health_score: int | None = None


@dataclass
class Message:
    id: str
    sender_id: str
    sender_role: str
    receiver_role: str
    content: str
    created_at: str
    receiver_id: str | None = None
    team_id: str | None = None
    read_at: str | None = None

    @property
    def is_broadcast(self) -> bool:
        return self.receiver_id is None


@dataclass(frozen=True)
class PresenceRecord:
    actor_id: str
    role: str
    online_since: str
    # One per tracked session, so the same actor can be online twice.
    ref: str


@dataclass(frozen=True)
class TranscriptEntry:
    id: str
    origin: Origin
    content: str
    timestamp: str
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class Command:
    name: str
    arguments: list[str]
    raw: str
    text: str = ""
    options: dict[str, str] = field(default_factory=dict)
    synthesized: bool = False


@dataclass(frozen=True)
class ParsedInput:
    kind: str
    raw: str
    command: Command | None = None
    query: str | None = None

    COMMAND = "command"
    QUERY = "query"

    @property
    def name(self) -> str | None:
        return self.command.name if self.command else None

    @property
    def arguments(self) -> list[str]:
        return self.command.arguments if self.command else []


@dataclass(frozen=True)
class SideEffect:
    collection: str
    record_id: str
    action: str = "insert"


@dataclass
class HandlerResult:
    success: bool
    message: str
    side_effects: list[SideEffect] = field(default_factory=list)
    error: ErrorKind | None = None
    usage: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, side_effects: list[SideEffect] | None = None, **data) -> "HandlerResult":
        return cls(success=True, message=message, side_effects=side_effects or [], data=data)

    @classmethod
    def fail(cls, message: str, error: ErrorKind, usage: str | None = None) -> "HandlerResult":
        return cls(success=False, message=message, error=error, usage=usage)

    def written(self, collection: str) -> list[str]:
        return [e.record_id for e in self.side_effects if e.collection == collection]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "error": self.error.value if self.error else None,
            "usage": self.usage,
            "side_effects": [
                {"collection": e.collection, "record_id": e.record_id, "action": e.action}
                for e in self.side_effects
            ],
            "data": self.data,
        }
