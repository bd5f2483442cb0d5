"""
API module for the AutoMatch engine.

Registry storage, the remote scoring client and the orchestrator that
chooses between remote and local scoring.
"""

from .orchestrator import AutoMatchResponse, MatchOrchestrator
from .remote import (
    RemoteAuthError,
    RemoteResponse,
    RemoteScoringClient,
    RemoteScoringError,
    RemoteUnavailableError,
)
from .storage import RegistryError, RegistryStorage, create_sample_registry

__all__ = [
    "AutoMatchResponse",
    "MatchOrchestrator",
    "RemoteAuthError",
    "RemoteResponse",
    "RemoteScoringClient",
    "RemoteScoringError",
    "RemoteUnavailableError",
    "RegistryError",
    "RegistryStorage",
    "create_sample_registry",
]
