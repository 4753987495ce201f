"""Engine Layer - Core retrieval workflow

This module provides the core engine layer for the INPI retrieval, implementing:
- RetrievalWorkflow: fixed four-step session state machine
- RetryPolicy: per-step bounded retries with increasing backoff
- PacingPolicy: randomized human-scale delays
- ResultValidator: result page classification
- Result types: AttemptOutcome, RetrievalOutcome, enums
"""

from .events import EventSink, LoggingEventSink, WorkflowEvent
from .pacing import PacingPolicy
from .result import AttemptOutcome, Classification, FailureKind, RetrievalOutcome, WorkflowState
from .retry import RetryPolicy
from .steps import StepSpec, build_default_steps
from .validator import ResultValidator, classify
from .workflow import RetrievalWorkflow, validate_search_term

__all__ = [
    "RetrievalWorkflow",
    "RetryPolicy",
    "PacingPolicy",
    "ResultValidator",
    "classify",
    "StepSpec",
    "build_default_steps",
    "validate_search_term",
    # Events
    "EventSink",
    "LoggingEventSink",
    "WorkflowEvent",
    # Results
    "AttemptOutcome",
    "RetrievalOutcome",
    "Classification",
    "FailureKind",
    "WorkflowState",
]
