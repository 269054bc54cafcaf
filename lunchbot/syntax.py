"""
Command parser for the `lb ...` chat language.

Each rule pairs a regular expression with a builder. Rules are tried in
order and the first pattern that matches decides the result, so the
numeric `lb add 5` is claimed before the `lb add <user> to <group>` form.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .models import UINT32_MAX, ListOption

# A bare word with hyphens, or a quoted phrase; quotes are kept in the result
_PLACE = r"""([\w-]+|'[\w\- ]+'|"[\w\- ]+")"""
_TIME = r"([\w:]+)"


@dataclass
class Add:
    amount: int


@dataclass
class AddUser:
    user: str
    group: str


@dataclass
class GroupAdd:
    name: str
    users: list[str]


@dataclass
class GroupRemove:
    name: str


@dataclass
class Propose:
    place: str
    time: str
    group: Optional[str] = None
    meeting_point: Optional[tuple[str, str]] = None


@dataclass
class List:
    option: ListOption = ListOption.PROPOSALS


@dataclass
class DumpState:
    pass


@dataclass
class RestoreState:
    payload: str


Command = Union[Add, AddUser, GroupAdd, GroupRemove, Propose, List, DumpState, RestoreState]


def _add(match: re.Match) -> Optional[Command]:
    try:
        amount = int(match.group(1))
    except ValueError:
        return None
    if amount > UINT32_MAX:
        return None
    return Add(amount)


def _add_user(match: re.Match) -> Optional[Command]:
    return AddUser(user=match.group(1), group=match.group(2))


def _group(match: re.Match) -> Optional[Command]:
    if match.group(1):
        return GroupAdd(name=match.group(2), users=match.group(3).split(","))
    if match.group(4):
        return GroupRemove(name=match.group(5))
    return None


def _propose(match: re.Match) -> Optional[Command]:
    meeting_point = None
    if match.group(4) is not None:
        meeting_point = (match.group(4), match.group(5))
    return Propose(
        place=match.group(1),
        time=match.group(2),
        group=match.group(3),
        meeting_point=meeting_point,
    )


def _list(match: re.Match) -> Optional[Command]:
    option = match.group(1)
    if option is None:
        return List(ListOption.PROPOSALS)
    return List(ListOption(option))


def _dump_state(match: re.Match) -> Optional[Command]:
    return DumpState()


def _restore_state(match: re.Match) -> Optional[Command]:
    return RestoreState(payload=match.group(1))


RULES: list[tuple[Callable[[str], Optional[re.Match]], Callable[[re.Match], Optional[Command]]]] = [
    (re.compile(r"lb add (\d+)", re.ASCII).match, _add),
    (re.compile(r"lb add (\w+) to (\w+)", re.ASCII).match, _add_user),
    (re.compile(r"lb group (?:(add) (\w+) ([\w,]+)|(remove) (\w+))", re.ASCII).match, _group),
    (
        re.compile(
            rf"lb propose {_PLACE}(?: (?:at|@))? {_TIME}"
            rf"(?: to (\w+))?(?: meet {_PLACE} {_TIME})?",
            re.ASCII,
        ).match,
        _propose,
    ),
    (re.compile(r"lb list(?: (groups|proposals))?").match, _list),
    (re.compile(r"lb dumpstate").fullmatch, _dump_state),
    (re.compile(r"lb restore (.*)", re.DOTALL).match, _restore_state),
]


def parse_command(line: str) -> Optional[Command]:
    """
    Parse one chat line into a command.

    Returns None when no rule matches, or when the first matching rule
    rejects its arguments (e.g. a counter value that does not fit 32 bits).
    """
    for matcher, build in RULES:
        match = matcher(line)
        if match:
            return build(match)
    return None
