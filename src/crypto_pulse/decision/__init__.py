"""Decision layer exports."""

from crypto_pulse.decision.correlator import PendingAnalysisStore, ResolveResult
from crypto_pulse.decision.prompt_builder import PromptBuilder

__all__ = ["PendingAnalysisStore", "PromptBuilder", "ResolveResult"]
