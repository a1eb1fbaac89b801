"""Serverless-style extraction function served with aiohttp."""

from wisdom.functions.extract_insights import create_app, dispatch

__all__ = ["create_app", "dispatch"]
