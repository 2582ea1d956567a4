import pytest

from exceptions import MalformedMessage
from schemas.signals import EventKind, parse_frame


def test_parse_join():
    parsed = parse_frame('{"type": "join", "data": {"room": "lobby"}}')
    assert parsed.kind is EventKind.JOIN
    assert parsed.data == {"room": "lobby"}


def test_parse_signal_without_data():
    parsed = parse_frame('{"type": "answer"}')
    assert parsed.kind is EventKind.ANSWER
    assert parsed.data is None


def test_ice_is_a_candidate():
    parsed = parse_frame('{"type": "ice", "data": {"candidate": "c"}}')
    assert parsed.kind is EventKind.CANDIDATE
    assert parsed.name == "ice"


def test_payload_is_kept_verbatim():
    parsed = parse_frame('{"type": "offer", "data": {"sdp": "v=0", "list": [1, null, true]}}')
    assert parsed.data == {"sdp": "v=0", "list": [1, None, True]}


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "",
        "[1, 2]",
        '"offer"',
        '{"data": {}}',
        '{"type": 3}',
        '{"type": "message", "data": {}}',
        '{"type": "disconnect"}',
        '{"type": "malformed"}',
    ],
)
def test_malformed_frames(raw):
    with pytest.raises(MalformedMessage):
        parse_frame(raw)
