"""Tests for the state data model and its JSON encoding."""

import json
from datetime import datetime, timezone

import pytest

from lunchbot.models import (
    Group,
    LunchBotState,
    Proposal,
    StateDecodeError,
    decode_timestamp,
    encode_timestamp,
)

from conftest import T0


def test_update_names_matches_prefixes():
    group = Group("team", ["alice", "bob", "dave"])
    assert group.update_names(["carol", "bob|mtg", "alice|lunch", "alice2"]) == [
        "alice|lunch",
        "bob|mtg",
    ]


def test_update_names_empty_base_matches_first_member():
    group = Group("team", ["", "bob"])
    assert group.update_names(["zed", "bob"]) == ["zed", "bob"]


def test_update_names_no_members():
    assert Group("team", ["alice"]).update_names([]) == []


def test_proposal_str():
    assert str(Proposal("'taste of india'", "10:55")) == "'taste of india' at 10:55"


def test_timestamp_matches_serde_layout():
    encoded = {"secs_since_epoch": 1500000000, "nanos_since_epoch": 123456000}
    value = decode_timestamp(encoded)
    assert value == datetime(2017, 7, 14, 2, 40, 0, 123456, tzinfo=timezone.utc)
    assert encode_timestamp(value) == encoded


def test_timestamp_truncates_to_microseconds():
    value = decode_timestamp({"secs_since_epoch": 10, "nanos_since_epoch": 999})
    assert value.microsecond == 0


@pytest.mark.parametrize("encoded", [
    {"secs_since_epoch": 1},
    {"secs_since_epoch": -1, "nanos_since_epoch": 0},
    {"secs_since_epoch": 1, "nanos_since_epoch": 1_000_000_000},
    {"secs_since_epoch": "1", "nanos_since_epoch": 0},
    {"secs_since_epoch": True, "nanos_since_epoch": 0},
    {"secs_since_epoch": 10**15, "nanos_since_epoch": 0},
])
def test_timestamp_rejects_invalid(encoded):
    with pytest.raises(StateDecodeError):
        decode_timestamp(encoded)


def test_state_round_trip():
    state = LunchBotState(
        channel="#lunch",
        groups=[Group("team", ["alice", "", "alice"])],
        proposals=[
            Proposal("cafe", "12:00", "team", ("lobby", "11:50"), created=T0),
            Proposal('"pub"', "13:00", created=T0),
        ],
        store=4294967295,
    )
    assert LunchBotState.from_json(state.to_json()) == state


def test_decode_without_meeting_point():
    payload = json.dumps({
        "groups": [],
        "proposals": [{
            "place": "winston",
            "time": "10:55",
            "group": None,
            "created": {"secs_since_epoch": 1500000000, "nanos_since_epoch": 0},
        }],
        "store": 2,
        "channel": "#ahoj",
        "extra": "ignored",
    })
    state = LunchBotState.from_json(payload)
    assert state.proposals[0].meeting_point is None
    assert state.channel == "#ahoj"


@pytest.mark.parametrize("payload", [
    "",
    "[]",
    "not json",
    '{"groups": [], "proposals": [], "channel": "#c"}',
    '{"groups": [], "proposals": [], "store": -1, "channel": "#c"}',
    '{"groups": [], "proposals": [], "store": 4294967296, "channel": "#c"}',
    '{"groups": [], "proposals": [], "store": true, "channel": "#c"}',
    '{"groups": [], "proposals": [], "store": 1, "channel": 5}',
    '{"groups": {}, "proposals": [], "store": 1, "channel": "#c"}',
    '{"groups": [{"name": "g", "users": [1]}], "proposals": [], "store": 1, "channel": "#c"}',
    '{"groups": ["g"], "proposals": [], "store": 1, "channel": "#c"}',
    '{"groups": [], "proposals": [{"place": "x", "time": "1"}], "store": 1, "channel": "#c"}',
    '{"groups": [], "proposals": [], "store": ' + "1" * 5000 + ', "channel": "#c"}',
    "[" * 100000,
])
def test_decode_rejects_invalid(payload):
    with pytest.raises(StateDecodeError):
        LunchBotState.from_json(payload)


def test_remove_old_proposals_boundary():
    state = LunchBotState(channel="#c", proposals=[Proposal("a", "1", created=T0)])
    assert state.remove_old_proposals(T0.replace(hour=12, minute=59)) == 0
    assert state.remove_old_proposals(T0.replace(hour=13)) == 1
    assert state.proposals == []
