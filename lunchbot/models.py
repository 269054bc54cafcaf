"""
Data models for the lunch bot state.

The whole LunchBotState is the unit of serialization: it is dumped to JSON
for backups and for the `lb dumpstate` command, and restored from it.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
UINT32_MAX = 2**32 - 1
PROPOSAL_MAX_AGE = timedelta(hours=2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StateDecodeError(ValueError):
    """Raised when a serialized state cannot be turned back into a LunchBotState."""


class ListOption(Enum):
    GROUPS = "groups"
    PROPOSALS = "proposals"


@dataclass
class Group:
    """A named group of users; the order of users is the display order."""
    name: str
    users: list[str] = field(default_factory=list)

    def push_user(self, user: str) -> None:
        self.users.append(user)

    def update_names(self, members: list[str]) -> list[str]:
        """
        Map base user names to the nicknames currently present in the channel.

        Nicknames usually carry a suffix such as `|lunch` or `|mtg`, so each
        base name picks the first member that starts with it. Users that are
        not present are dropped.
        """
        roster = []
        for base_user in self.users:
            for member in members:
                if member.startswith(base_user):
                    roster.append(member)
                    break
        return roster

    def __str__(self) -> str:
        return ",".join(self.users)

    def to_dict(self) -> dict:
        return {"name": self.name, "users": list(self.users)}

    @classmethod
    def from_dict(cls, data: dict) -> "Group":
        name = _expect(data, "name", str)
        users = _expect(data, "users", list)
        if not all(isinstance(u, str) for u in users):
            raise StateDecodeError("group users must be strings")
        return cls(name=name, users=list(users))


@dataclass
class Proposal:
    """A lunch suggestion; `group` is the group name at the time of proposing."""
    place: str
    time: str
    group: Optional[str] = None
    meeting_point: Optional[tuple[str, str]] = None
    created: datetime = field(default_factory=utcnow)

    def age(self, now: datetime) -> timedelta:
        return now - self.created

    def __str__(self) -> str:
        return f"{self.place} at {self.time}"

    def to_dict(self) -> dict:
        return {
            "place": self.place,
            "time": self.time,
            "group": self.group,
            "meeting_point": list(self.meeting_point) if self.meeting_point else None,
            "created": encode_timestamp(self.created),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Proposal":
        group = data.get("group")
        if group is not None and not isinstance(group, str):
            raise StateDecodeError("proposal group must be a string or null")

        meeting_point = data.get("meeting_point")
        if meeting_point is not None:
            if (
                not isinstance(meeting_point, list)
                or len(meeting_point) != 2
                or not all(isinstance(v, str) for v in meeting_point)
            ):
                raise StateDecodeError("meeting_point must be a [place, time] pair")
            meeting_point = (meeting_point[0], meeting_point[1])

        return cls(
            place=_expect(data, "place", str),
            time=_expect(data, "time", str),
            group=group,
            meeting_point=meeting_point,
            created=decode_timestamp(_expect(data, "created", dict)),
        )


@dataclass
class LunchBotState:
    """Groups, proposals, the shared counter and the home channel."""
    channel: str
    groups: list[Group] = field(default_factory=list)
    proposals: list[Proposal] = field(default_factory=list)
    store: int = 0

    def get_group(self, name: str) -> Optional[Group]:
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def remove_group(self, name: str) -> bool:
        """Remove every group called `name`; True if any was removed."""
        length = len(self.groups)
        self.groups = [g for g in self.groups if g.name != name]
        return len(self.groups) < length

    def list_of_groups(self) -> str:
        return ",".join(g.name for g in self.groups)

    def remove_old_proposals(
        self,
        now: datetime,
        max_age: timedelta = PROPOSAL_MAX_AGE
    ) -> int:
        """
        Drop proposals at least `max_age` old and return how many were dropped.

        A proposal created after `now` has a negative age and is kept.
        """
        before = len(self.proposals)
        self.proposals = [p for p in self.proposals if p.age(now) < max_age]
        return before - len(self.proposals)

    def to_dict(self) -> dict:
        return {
            "groups": [g.to_dict() for g in self.groups],
            "proposals": [p.to_dict() for p in self.proposals],
            "store": self.store,
            "channel": self.channel,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> "LunchBotState":
        if not isinstance(data, dict):
            raise StateDecodeError("state must be a JSON object")

        store = data.get("store")
        if isinstance(store, bool) or not isinstance(store, int):
            raise StateDecodeError("store must be an integer")
        if not 0 <= store <= UINT32_MAX:
            raise StateDecodeError(f"store out of range: {store}")

        groups = _expect(data, "groups", list)
        proposals = _expect(data, "proposals", list)

        return cls(
            channel=_expect(data, "channel", str),
            groups=[Group.from_dict(_as_object(g)) for g in groups],
            proposals=[Proposal.from_dict(_as_object(p)) for p in proposals],
            store=store,
        )

    @classmethod
    def from_json(cls, text: str) -> "LunchBotState":
        try:
            data = json.loads(text)
        except (ValueError, TypeError, RecursionError) as e:
            raise StateDecodeError(f"invalid JSON: {e}") from e
        return cls.from_dict(data)


def encode_timestamp(value: datetime) -> dict:
    """Encode an aware datetime as seconds and nanoseconds since the Unix epoch."""
    delta = value - EPOCH
    return {
        "secs_since_epoch": delta.days * 86400 + delta.seconds,
        "nanos_since_epoch": delta.microseconds * 1000,
    }


def decode_timestamp(data: dict) -> datetime:
    secs = _expect(data, "secs_since_epoch", int)
    nanos = _expect(data, "nanos_since_epoch", int)
    if isinstance(secs, bool) or isinstance(nanos, bool):
        raise StateDecodeError("timestamp fields must be integers")
    if secs < 0 or not 0 <= nanos < 1_000_000_000:
        raise StateDecodeError("timestamp out of range")
    try:
        return EPOCH + timedelta(seconds=secs, microseconds=nanos // 1000)
    except OverflowError as e:
        raise StateDecodeError(f"timestamp out of range: {secs}") from e


def _as_object(value) -> dict:
    if not isinstance(value, dict):
        raise StateDecodeError("expected a JSON object")
    return value


def _expect(data: dict, key: str, kind: type):
    if key not in data:
        raise StateDecodeError(f"missing field: {key}")
    value = data[key]
    if not isinstance(value, kind):
        raise StateDecodeError(f"field {key} must be of type {kind.__name__}")
    return value
