import pytest

from oracle.commands.parser import parse, split_arguments, strip_quotes
from oracle.models import ParsedInput


def test_slash_command_name_and_arguments():
    parsed = parse("/Find react developer")

    assert parsed.kind == ParsedInput.COMMAND
    assert parsed.name == "find"
    assert parsed.arguments == ["react", "developer"]
    assert parsed.command.text == "react developer"
    assert parsed.command.synthesized is False


def test_slash_text_keeps_whitespace_and_strips_one_quote_pair():
    parsed = parse('/update "Completed   login flow"')

    assert parsed.command.text == "Completed   login flow"
    assert parsed.arguments == ["Completed   login flow"]


def test_text_keeps_inner_quotes_when_not_enclosing():
    parsed = parse('/message @Alice "hi there"')

    assert parsed.command.text == '@Alice "hi there"'
    assert parsed.arguments == ["@Alice", "hi there"]


def test_unbalanced_quotes_fall_back_to_whitespace_split():
    parsed = parse('/update "it broke')

    assert parsed.name == "update"
    assert parsed.arguments == ['"it', "broke"]


@pytest.mark.parametrize("raw,name", [("/", ""), ("/???", "???"), ("  /STATUS  ", "status")])
def test_odd_slash_input_still_parses(raw, name):
    parsed = parse(raw)

    assert parsed.kind == ParsedInput.COMMAND
    assert parsed.name == name


def test_empty_input_is_empty_query():
    parsed = parse("")

    assert parsed.kind == ParsedInput.QUERY
    assert parsed.query == ""
    assert parse(None).query == ""


def test_freeform_text_is_query():
    parsed = parse("How do I validate my idea?")

    assert parsed.kind == ParsedInput.QUERY
    assert parsed.query == "How do I validate my idea?"
    assert parsed.command is None


def test_natural_message_to_user_gets_mention_prefix():
    parsed = parse("tell alice that the demo moved to 3pm")

    assert parsed.name == "message"
    assert parsed.command.synthesized
    assert parsed.arguments[0] == "@alice"
    assert parsed.command.text == "@alice the demo moved to 3pm"


def test_natural_message_to_role_keeps_keyword():
    parsed = parse("send to mentors: office hours start now")

    assert parsed.name == "message"
    assert parsed.arguments[0] == "mentors"
    assert parsed.command.text == "mentors office hours start now"


def test_natural_message_keeps_explicit_mention():
    parsed = parse("message @Bob: ship it")

    assert parsed.command.text == "@Bob ship it"


@pytest.mark.parametrize(
    "raw",
    [
        "update: finished onboarding flow",
        "log progress: finished onboarding flow",
        "Record work: finished onboarding flow",
        "update status:finished onboarding flow",
    ],
)
def test_natural_update(raw):
    parsed = parse(raw)

    assert parsed.name == "update"
    assert parsed.command.text == "finished onboarding flow"


def test_natural_broadcast_defaults_to_all():
    parsed = parse("broadcast: demo day is Friday")

    assert parsed.name == "broadcast"
    assert parsed.command.options == {"scope": "all"}
    assert parsed.command.text == "demo day is Friday"


def test_natural_broadcast_scope():
    parsed = parse("broadcast to team: standup moved")

    assert parsed.command.options == {"scope": "team"}
    assert parsed.command.text == "standup moved"


def test_message_pattern_wins_over_later_patterns():
    parsed = parse("tell leo that update: done")

    assert parsed.name == "message"


def test_update_without_colon_is_query():
    assert parse("update the roadmap please").kind == ParsedInput.QUERY


def test_helpers():
    assert strip_quotes("'x'") == "x"
    assert strip_quotes('"a" "b"') == '"a" "b"'
    assert split_arguments("a 'b c'") == ["a", "b c"]
