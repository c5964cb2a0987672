"""Command groups registered on the top-level parser."""

from mmadmin.commands import bot, lookup

COMMAND_GROUPS = (bot, lookup)
