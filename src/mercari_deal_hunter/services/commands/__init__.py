"""Operator command handling."""

from mercari_deal_hunter.services.commands.command_listener import TelegramCommandListener

__all__ = ["TelegramCommandListener"]
