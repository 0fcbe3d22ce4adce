"""Safety policy for automatic corrections."""

from .gate import DANGEROUS_BASES, ArgumentRule, GateResult, SafetyGate, has_risky_args

__all__ = ["DANGEROUS_BASES", "ArgumentRule", "GateResult", "SafetyGate", "has_risky_args"]
