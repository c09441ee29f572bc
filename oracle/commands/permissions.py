"""Role → capability matrix. Immutable; shared by every dispatch."""

from types import MappingProxyType

from oracle.models import Capability, Role

C = Capability

PERMISSIONS: MappingProxyType[Role, frozenset[Capability]] = MappingProxyType(
    {
        Role.BUILDER: frozenset({C.VIEW_TEAM_DATA, C.EDIT_OWN_PROGRESS, C.SEND_MESSAGES}),
        Role.MENTOR: frozenset(
            {
                C.VIEW_TEAM_DATA,
                C.EDIT_OWN_PROGRESS,
                C.SEND_MESSAGES,
                C.VIEW_ALL_TEAMS,
                C.RUN_ANALYSIS,
            }
        ),
        Role.LEAD: frozenset(
            {
                C.VIEW_TEAM_DATA,
                C.EDIT_OWN_PROGRESS,
                C.SEND_MESSAGES,
                C.SEND_BROADCASTS,
                C.VIEW_ALL_TEAMS,
                C.EDIT_ANY_TEAM,
                C.RUN_ANALYSIS,
            }
        ),
        Role.GUEST: frozenset({C.SEND_MESSAGES}),
        Role.UNASSIGNED: frozenset(),
    }
)


def capabilities(role: Role | str | None) -> frozenset[Capability]:
    parsed = Role.parse(role)
    if parsed is None:
        return frozenset()
    return PERMISSIONS[parsed]


def authorize(role: Role | str | None, capability: Capability | None) -> bool:
    """Fail-closed lookup. An ungated command (capability None) needs only a known role."""
    parsed = Role.parse(role)
    if parsed is None:
        return False
    if capability is None:
        return True
    return capability in PERMISSIONS[parsed]
