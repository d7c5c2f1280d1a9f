"""Omnisearch — unified search across workplace tools.

Connects to many third-party tools (chat, project management, code
hosting, mail, calendar and files), keeps their connection and health
state, and fans one query out to every connected tool, merging the
answers into a single relevance-ranked list.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
