"""``discord.py`` implementation of :class:`~vatsim_listing.listing.publisher.ListingChannel`."""

from __future__ import annotations

import logging
from typing import List, Optional

import discord

from .correlator import MemberRecord
from .publisher import ListingMessage

logger = logging.getLogger(__name__)


def member_record(member: discord.Member) -> MemberRecord:
    # Guild nickname first, then the account name.
    return MemberRecord(member_id=str(member.id), display_name=member.nick or member.name)


class DiscordListingChannel:
    """Adapts a guild text channel to the publisher's channel protocol."""

    def __init__(self, channel: discord.TextChannel) -> None:
        self.channel = channel

    @property
    def guild(self) -> discord.Guild:
        return self.channel.guild

    async def fetch_members(self) -> List[MemberRecord]:
        return [member_record(m) async for m in self.guild.fetch_members(limit=None)]

    async def fetch_message(self, message_id: str) -> Optional[ListingMessage]:
        try:
            message = await self.channel.fetch_message(int(message_id))
        except (discord.NotFound, discord.Forbidden):
            # Deleted, or history is no longer readable by the bot
            return None

        me = self.guild.me
        return ListingMessage(
            id=str(message.id),
            created_at=message.created_at,
            editable=me is not None and message.author.id == me.id,
        )

    async def recent_message_ids(self, limit: int) -> List[str]:
        return [str(m.id) async for m in self.channel.history(limit=limit)]

    async def bulk_delete(self, message_ids: List[str]) -> None:
        if not message_ids:
            return
        await self.channel.delete_messages([discord.Object(id=int(mid)) for mid in message_ids])

    async def send(self, content: str) -> str:
        message = await self.channel.send(content)
        return str(message.id)

    async def edit(self, message_id: str, content: str) -> None:
        await self.channel.get_partial_message(int(message_id)).edit(content=content)


__all__ = ["DiscordListingChannel", "member_record"]
