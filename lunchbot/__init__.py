"""
Lunch bot core.

Contains the command parser, the shared state engine and the glue used to
run it behind Slack: dispatcher, membership lookup, periodic tasks and backups.
"""

from .models import Group, Proposal, LunchBotState, ListOption, StateDecodeError
from .syntax import parse_command
from .engine import LunchBotEngine, USAGE
from .dispatcher import Dispatcher
from .membership import SlackMembershipResolver
from .scheduler import PeriodicTask
from .storage import backup_state, recover_state
from .config import BotConfig, ConfigError

__all__ = [
    'Group',
    'Proposal',
    'LunchBotState',
    'ListOption',
    'StateDecodeError',
    'parse_command',
    'LunchBotEngine',
    'USAGE',
    'Dispatcher',
    'SlackMembershipResolver',
    'PeriodicTask',
    'backup_state',
    'recover_state',
    'BotConfig',
    'ConfigError',
]
