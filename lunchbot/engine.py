"""
State engine for the lunch bot.

Owns the LunchBotState and serializes every access to it through a single
lock. Chat lines, the cleanup task and the backup task all go through here.
"""

import copy
import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from .models import (
    UINT32_MAX,
    Group,
    ListOption,
    LunchBotState,
    Proposal,
    StateDecodeError,
    utcnow,
)
from .syntax import (
    Add,
    AddUser,
    DumpState,
    GroupAdd,
    GroupRemove,
    List,
    Propose,
    RestoreState,
    parse_command,
)

logger = logging.getLogger(__name__)

MembershipResolver = Callable[[str], list[str]]

USAGE = (
    "Lunch bot usage:\n"
    "  lb propose <place> [at|@] <time> [to <group>] [meet <place> <time>]"
    " - propose lunch, places with spaces go in quotes\n"
    "  lb list [proposals|groups] - show open proposals or known groups\n"
    "  lb group add <group> <user1,user2,...> - create a group\n"
    "  lb group remove <group> - remove a group\n"
    "  lb add <user> to <group> - add a user to a group\n"
    "  lb add <number> - add to the shared counter\n"
    "  lb dumpstate - print the whole state as JSON\n"
    "  lb restore <json> - replace the whole state"
)

DUMP_FAILED = "failed to dump state"
RESTORE_OK = "Success"
RESTORE_FAILED = "Fail"
NO_SUCH_GROUP = "-No such group-"


class LunchBotEngine:
    """Applies chat commands to the shared lunch state."""

    def __init__(
        self,
        channel: str,
        clock: Callable[[], datetime] = utcnow
    ):
        self._state = LunchBotState(channel=channel)
        self._lock = threading.Lock()
        self._clock = clock

    @property
    def state(self) -> LunchBotState:
        """A deep copy of the current state."""
        with self._lock:
            return copy.deepcopy(self._state)

    def num_of_proposals(self) -> int:
        with self._lock:
            return len(self._state.proposals)

    def apply(self, line: str, list_members: MembershipResolver) -> str:
        """
        Parse a chat line, update the state and return the reply text.

        Args:
            line: Message text, including the `lb ` prefix
            list_members: Returns the nicknames currently in a channel

        Returns:
            Reply to send back to the channel
        """
        cmd = parse_command(line)
        if cmd is not None:
            logger.info(f"Incoming command: {cmd!r}")

        if isinstance(cmd, Add):
            return self._add(cmd.amount)
        if isinstance(cmd, AddUser):
            return self._add_user(cmd.user, cmd.group)
        if isinstance(cmd, GroupAdd):
            return self._group_add(cmd.name, cmd.users)
        if isinstance(cmd, GroupRemove):
            return self._group_remove(cmd.name)
        if isinstance(cmd, Propose):
            return self._propose(cmd, list_members)
        if isinstance(cmd, List):
            return self._list(cmd.option)
        if isinstance(cmd, DumpState):
            return self._dump_state()
        if isinstance(cmd, RestoreState):
            return self._restore_state(cmd.payload)
        return USAGE

    def expire_proposals(self) -> int:
        """Remove proposals older than two hours; returns the number removed."""
        with self._lock:
            removed = self._state.remove_old_proposals(self._clock())
        if removed > 0:
            logger.info(f"Removing {removed} old proposals")
        return removed

    def serialize(self) -> str:
        with self._lock:
            return self._state.to_json()

    def restore(self, payload: str) -> None:
        """
        Replace the whole state with a serialized one.

        Raises:
            StateDecodeError: if the payload is not a valid state; the current
                state is left untouched.
        """
        new_state = LunchBotState.from_json(payload)
        with self._lock:
            self._state = new_state

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _add(self, amount: int) -> str:
        with self._lock:
            # Counter is an unsigned 32-bit value and wraps around
            self._state.store = (self._state.store + amount) & UINT32_MAX
            return f"Store: {self._state.store}"

    def _add_user(self, user: str, group_name: str) -> str:
        with self._lock:
            group = self._state.get_group(group_name)
            if group is None:
                return f"No group named {group_name}"
            group.push_user(user)
            return f"Group {group.name} updated: {group}"

    def _group_add(self, name: str, users: list[str]) -> str:
        group = Group(name=name, users=list(users))
        with self._lock:
            self._state.groups.append(group)
        return f"New group: {name} - {group}"

    def _group_remove(self, name: str) -> str:
        with self._lock:
            removed = self._state.remove_group(name)
        if removed:
            return f"Group {name} has been removed"
        return f"No such group: {name}"

    def _propose(self, cmd: Propose, list_members: MembershipResolver) -> str:
        with self._lock:
            proposal = Proposal(
                place=cmd.place,
                time=cmd.time,
                group=cmd.group,
                meeting_point=cmd.meeting_point,
                created=self._clock(),
            )

            if cmd.group is None:
                self._state.proposals.append(proposal)
                return f"New proposal: go to {cmd.place} at {cmd.time}"

            roster: Optional[list[str]] = None
            group = self._state.get_group(cmd.group)
            if group is not None:
                members = list_members(self._state.channel)
                roster = group.update_names(members)
                logger.info(
                    f"Proposal {proposal}, group {group.name}: {group}, names {roster}"
                )
            self._state.proposals.append(proposal)

        if roster is None:
            return f"{NO_SUCH_GROUP} go to {cmd.place} at {cmd.time}"
        return f"{','.join(roster)} go to {cmd.place} at {cmd.time}"

    def _list(self, option: ListOption) -> str:
        with self._lock:
            if option == ListOption.GROUPS:
                return f"Groups: {self._state.list_of_groups()}"
            proposals = ", ".join(str(p) for p in self._state.proposals)
        return f"All proposals: [{proposals}]"

    def _dump_state(self) -> str:
        try:
            return self.serialize()
        except (TypeError, ValueError):
            logger.exception("Failed to dump state")
            return DUMP_FAILED

    def _restore_state(self, payload: str) -> str:
        try:
            self.restore(payload)
        except StateDecodeError as e:
            logger.warning(f"Failed to restore state: {e}")
            return RESTORE_FAILED
        logger.info("State restored from chat")
        return RESTORE_OK
