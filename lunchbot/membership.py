"""
Channel membership lookup through the Slack Web API.
"""

import logging

from slack_sdk.errors import SlackClientError

logger = logging.getLogger(__name__)


class SlackMembershipResolver:
    """
    Returns the display names of the users currently in a channel.

    Called by the engine while proposing lunch to a group, so group members
    can be matched against decorated names such as `alice|lunch`.
    """

    def __init__(self, client, page_size: int = 200):
        self.client = client
        self.page_size = page_size

    def __call__(self, channel: str) -> list[str]:
        try:
            member_ids = self._member_ids(channel)
            names = self._display_names()
        except (SlackClientError, OSError) as e:
            logger.error(f"The user list cannot be acquired for {channel}: {e}")
            return []
        return [names.get(user_id, user_id) for user_id in member_ids]

    def _paginate(self, method, key: str, **kwargs) -> list:
        items = []
        cursor = None

        while True:
            if cursor:
                kwargs["cursor"] = cursor
            response = method(limit=self.page_size, **kwargs)
            items.extend(response[key])

            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return items

    def _member_ids(self, channel: str) -> list[str]:
        return self._paginate(self.client.conversations_members, "members", channel=channel)

    def _display_names(self) -> dict[str, str]:
        """Map user IDs to display names with one paginated `users.list` walk."""
        names = {}
        for user in self._paginate(self.client.users_list, "members"):
            profile = user.get("profile") or {}
            names[user["id"]] = profile.get("display_name") or user.get("name") or user["id"]
        return names
