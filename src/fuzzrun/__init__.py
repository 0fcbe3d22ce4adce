"""FuzzRun - re-run mistyped shell commands with a high-confidence fix."""

__version__ = "0.1.0"

# Core components - lazy imports keep `fuzzrun --help` fast
def __getattr__(name: str):
    """Lazy import of the public API."""
    if name == "CorrectionPipeline":
        from fuzzrun.core import CorrectionPipeline
        return CorrectionPipeline
    elif name == "FuzzRunConfig":
        from fuzzrun.config import FuzzRunConfig
        return FuzzRunConfig
    elif name == "SafetyGate":
        from fuzzrun.policy.gate import SafetyGate
        return SafetyGate
    elif name == "CandidateSources":
        from fuzzrun.sources.dynamic import CandidateSources
        return CandidateSources
    elif name == "Invocation":
        from fuzzrun.execution.runner import Invocation
        return Invocation
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "CorrectionPipeline",
    "FuzzRunConfig",
    "SafetyGate",
    "CandidateSources",
    "Invocation",
]
