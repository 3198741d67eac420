"""
Answer generation: prompt building and streamed orchestration.
"""

from bookrag.core.generation.orchestrator import (
    GenerationOrchestrator,
    GenerationRequest,
    GenerationState,
    MessageStore,
)
from bookrag.core.generation.prompt_builder import NO_CONTEXT_MESSAGE, BuiltPrompt, GenerationTask, PromptBuilder

__all__ = [
    "BuiltPrompt",
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationState",
    "GenerationTask",
    "MessageStore",
    "NO_CONTEXT_MESSAGE",
    "PromptBuilder",
]
