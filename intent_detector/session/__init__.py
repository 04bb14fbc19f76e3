"""Session coordination between the audio producer and the intent stream."""

from .coordinator import IntentDetector, ProducerFactory, ProducerInitializer
from .state import SessionPhase, SessionState, TerminationCause

__all__ = [
    "IntentDetector",
    "ProducerFactory",
    "ProducerInitializer",
    "SessionPhase",
    "SessionState",
    "TerminationCause",
]
