"""Sleeper fantasy platform API access"""
from .client import SleeperClient, SleeperAPIError, identities_from_players

__all__ = ['SleeperClient', 'SleeperAPIError', 'identities_from_players']
