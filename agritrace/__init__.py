"""Agritrace: traceability for agricultural supply chain batches.

A batch's history is an append-only list of events held on a shared
ledger.  This package decides who may add which event, builds the
payload stored with it, and presents the history as a timeline:

  - Event type registry: static role → event type eligibility
  - Event payload builder: deterministic, empty-field-free JSON payloads
  - Batch traceability service: async façade over a Ledger Gateway
  - Timeline presenter: ordered, latest-marked, display-ready history
  - Local SQLite ledger gateway for development and tests
"""

__version__ = "0.1.0"
__description__ = "Agricultural supply chain batch traceability on an append-only ledger"

from agritrace.core.service import BatchTraceabilityService
from agritrace.timeline.presenter import present
from agritrace.cli.app import app

__all__ = ["BatchTraceabilityService", "present", "app", "__version__"]
