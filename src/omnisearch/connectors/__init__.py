"""Per-tool connectors.

Simulated connectors generate an in-memory dataset; credential-backed
connectors (Google) call the real service through an injected credential
provider.  Both share the :class:`BaseConnector` contract.
"""

from __future__ import annotations

from omnisearch.connectors.base import (
    NEVER_FAIL,
    BaseConnector,
    ConnectorConfig,
    DelayRange,
    FailureModel,
    SimulatedFailureModel,
    filter_results,
)
from omnisearch.connectors.github import GitHubConnector
from omnisearch.connectors.google import GoogleConnector
from omnisearch.connectors.jira import JiraConnector
from omnisearch.connectors.simulated import GenericConnector, SimulatedConnector
from omnisearch.connectors.slack import SlackConnector

__all__ = [
    "NEVER_FAIL",
    "BaseConnector",
    "ConnectorConfig",
    "DelayRange",
    "FailureModel",
    "GenericConnector",
    "GitHubConnector",
    "GoogleConnector",
    "JiraConnector",
    "SimulatedConnector",
    "SimulatedFailureModel",
    "SlackConnector",
    "filter_results",
]
