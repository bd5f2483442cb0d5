"""
AutoMatch Engine

Deterministic matching of funding requests against allocator mandates.

Modules:
  core    Pure scoring pipeline (enrich -> eliminate -> score -> aggregate)
  api     Registry storage, remote scoring client, orchestrator
  config  Runtime settings

Usage:
    from automatch.core import FundingRequest, AllocatorMandate, score_match
    from automatch.api import MatchOrchestrator
"""

__version__ = "1.0.0"
