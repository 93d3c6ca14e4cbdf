import pytest

from pravis.core.errors import FlowOutputError
from pravis.services.chat.parser import (
    FALLBACK_REPLY,
    AssistantResult,
    extract_json_block,
    load_structured_output,
)
from pravis.services.flows.insight import EmotionAnalysis
from pravis.tools.base import ToolRequest


# --- brace extraction ---

def test_extract_first_to_last_brace():
    raw = 'Sure! {"reply": "hi"} thanks'
    assert extract_json_block(raw) == '{"reply": "hi"}'


@pytest.mark.parametrize("raw", ["no braces here", "only { open", "only } close", "} backwards {", "", None])
def test_extract_missing_braces(raw):
    assert extract_json_block(raw) is None


def test_extract_is_naive_across_multiple_objects():
    raw = '{"reply": "a"} and {"reply": "b"}'
    # Spans both objects; the caller is expected to fail on it
    assert extract_json_block(raw) == raw


# --- replies ---

def test_plain_reply(parser):
    res = parser.parse('{"reply": "Hello there!"}')
    assert res.ok is True
    assert res.reply == "Hello there!"
    assert res.tool_request is None


def test_reply_wrapped_in_prose_is_unchanged(parser):
    text = 'Line one\n  "quoted" and unicode: café ✨'
    raw = 'Here you go:\n```json\n{"reply": ' + '"Line one\\n  \\"quoted\\" and unicode: café ✨"' + '}\n```'
    res = parser.parse(raw)
    assert res.reply == text


def test_empty_reply_is_still_a_reply(parser):
    res = parser.parse('{"reply": ""}')
    assert res.ok is True
    assert res.reply == ""


# --- tool requests ---

def test_calendar_tool_request_inside_prose(parser):
    raw = ('Sure! {"toolRequest":{"action":"navigateToCalendar","params":'
           '{"date":"2024-07-29","summary":"Dentist"}}} Hope that helps!')
    res = parser.parse(raw)
    assert res.ok is True
    assert res.reply is None
    assert res.tool_request.action == "navigateToCalendar"
    assert res.tool_request.params == {"date": "2024-07-29", "summary": "Dentist"}


def test_email_tool_request_subset(parser):
    raw = '{"toolRequest": {"action": "navigateToEmailCompose", "params": {"to": "alice@example.com"}}}'
    res = parser.parse(raw)
    assert res.tool_request.params == {"to": "alice@example.com"}


def test_tool_request_without_params(parser):
    res = parser.parse('{"toolRequest": {"action": "navigateToCalendar"}}')
    assert res.ok is True
    assert res.tool_request.params == {}


def test_null_sibling_is_allowed(parser):
    res = parser.parse('{"reply": null, "toolRequest": {"action": "navigateToCalendar", "params": null}}')
    assert res.tool_request.action == "navigateToCalendar"


# --- fallbacks ---

@pytest.mark.parametrize("raw", [
    "I'm not sure what you mean.",
    '{"reply": "unterminated"',
    "} {",
    '{"reply": "x",}',
    "{not json at all}",
    '["reply", "list"]',
    '{"reply": "a"} and {"reply": "b"}',
    '{"reply": "both", "toolRequest": {"action": "navigateToCalendar", "params": {}}}',
    "{}",
    '{"answer": "wrong key"}',
    '{"reply": 42}',
    '{"toolRequest": {"action": "deleteAllEmails", "params": {}}}',
    '{"toolRequest": {"params": {"date": "2024-07-29"}}}',
    '{"toolRequest": {"action": "navigateToCalendar", "params": {"date": "tomorrow"}}}',
    '{"toolRequest": {"action": "navigateToCalendar", "params": {"startTime": "25:00"}}}',
    '{"toolRequest": {"action": "navigateToCalendar", "params": {"location": "Clinic"}}}',
    '{"toolRequest": {"action": "navigateToEmailCompose", "params": {"to": ["a@b.com"]}}}',
    None,
])
def test_fallback_reply_verbatim(parser, raw):
    res = parser.parse(raw)
    assert res.ok is False
    assert res.reply == "Sorry, I could not understand or process your request."
    assert res.reply == FALLBACK_REPLY
    assert res.tool_request is None


def test_deeply_nested_output_falls_back(parser):
    raw = '{"reply": "hi", "x": ' + "[" * 100000 + "]" * 100000 + "}"
    res = parser.parse(raw)
    assert res.ok is False
    assert res.reply == FALLBACK_REPLY


def test_unknown_keys_are_dropped(parser):
    res = parser.parse('{"reply": "Hello there!", "confidence": 0.9}')
    assert res.ok is True
    assert res.reply == "Hello there!"

    res = parser.parse(
        '{"toolRequest": {"action": "navigateToCalendar", "reason": "user asked", '
        '"params": {"summary": "Gym"}}, "thoughts": "..."}'
    )
    assert res.tool_request == ToolRequest(action="navigateToCalendar", params={"summary": "Gym"})


def test_disabled_action_falls_back():
    from pravis.services.chat.parser import ResponseParser
    from pravis.tools.registry import ToolRegistry

    parser = ResponseParser(ToolRegistry({"tools": {"navigateToCalendar": {"enabled": False}}}))
    res = parser.parse('{"toolRequest": {"action": "navigateToCalendar", "params": {}}}')
    assert res.reply == FALLBACK_REPLY


def test_parse_is_idempotent(parser):
    for raw in [
        '{"reply": "Hello there!"}',
        'x {"toolRequest": {"action": "navigateToEmailCompose", "params": {"subject": "Hi"}}} y',
        "garbage",
    ]:
        assert parser.parse(raw) == parser.parse(raw)


def test_result_to_dict_has_exactly_one_key(parser):
    assert parser.parse('{"reply": "ok"}').to_dict() == {"reply": "ok"}
    d = parser.parse('{"toolRequest": {"action": "navigateToCalendar", "params": {"summary": "Gym"}}}').to_dict()
    assert d == {"toolRequest": {"action": "navigateToCalendar", "params": {"summary": "Gym"}}}
    assert AssistantResult.fallback().to_dict() == {"reply": FALLBACK_REPLY}


# --- structured flows ---

def test_load_structured_output():
    raw = 'Analysis:\n{"needsEmpatheticTouch": true, "summary": "Tense exchange"}'
    out = load_structured_output(raw, EmotionAnalysis)
    assert out.needs_empathetic_touch is True
    assert out.summary == "Tense exchange"


def test_load_structured_output_raises():
    with pytest.raises(FlowOutputError):
        load_structured_output("no json", EmotionAnalysis)
    with pytest.raises(FlowOutputError):
        load_structured_output('{"summary": "missing flag"}', EmotionAnalysis)
