"""Slack Integration Package.

This package contains the Slack integration modules. Contains:

- client: Per-token Slack WebClient management.
- channels: Channel enumeration.
"""
