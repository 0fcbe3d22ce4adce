"""Safety gate - keeps destructive commands out of automatic correction."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fuzzrun.execution.runner import Invocation

if TYPE_CHECKING:
    from fuzzrun.recovery.strategies import CorrectionProposal

logger = logging.getLogger(__name__)

# Never auto-run these, however confident the match
DANGEROUS_BASES = frozenset({"rm", "mv", "dd", "shutdown", "reboot", "halt", "poweroff"})


@dataclass
class ArgumentRule:
    """A destructive-flag pattern matched against whole arguments."""
    
    name: str
    description: str
    pattern: str  # Regex pattern
    ignore_case: bool = True
    
    def __post_init__(self) -> None:
        """Compile regex pattern."""
        self._compiled = re.compile(self.pattern, re.IGNORECASE if self.ignore_case else 0)
    
    def matches(self, arg: str) -> bool:
        """Check if an argument is exactly this flag."""
        return bool(self._compiled.fullmatch(arg))


@dataclass
class GateResult:
    """Result of gate evaluation."""
    
    allowed: bool
    rule: ArgumentRule | None = None
    message: str = ""


BUILTIN_RULES = (
    ArgumentRule(
        name="force_short",
        description="Short force flag",
        pattern=r"-f",
        ignore_case=False,
    ),
    ArgumentRule(
        name="recursive_force",
        description="Recursive force removal",
        pattern=r"-rf",
        ignore_case=False,
    ),
    ArgumentRule(
        name="force_recursive",
        description="Recursive force removal (flags reversed)",
        pattern=r"-fr",
        ignore_case=False,
    ),
    ArgumentRule(
        name="force",
        description="Long force flag",
        pattern=r"--force",
    ),
    ArgumentRule(
        name="hard",
        description="Hard reset discards work",
        pattern=r"--hard",
    ),
    ArgumentRule(
        name="delete",
        description="Deletes data",
        pattern=r"--delete",
    ),
    ArgumentRule(
        name="purge",
        description="Purges packages or data",
        pattern=r"--purge",
    ),
    ArgumentRule(
        name="no_preserve_root",
        description="Disables root protection",
        pattern=r"--no-preserve-root",
    ),
)


class SafetyGate:
    """Decides whether an invocation may be corrected automatically."""
    
    def __init__(
        self,
        rules: Iterable[ArgumentRule] | None = None,
        dangerous_bases: Iterable[str] = DANGEROUS_BASES,
    ) -> None:
        """Initialize the gate.
        
        Args:
            rules: Risky-argument rules (defaults to the built-in set)
            dangerous_bases: Base commands that are never proposed
        """
        self._rules: list[ArgumentRule] = list(BUILTIN_RULES if rules is None else rules)
        self.dangerous_bases = frozenset(dangerous_bases)
    
    def find_risky_arg(self, args: Iterable[str]) -> tuple[str, ArgumentRule] | None:
        """Return the first risky argument and the rule it trips."""
        for arg in args:
            for rule in self._rules:
                if rule.matches(arg):
                    return arg, rule
        return None
    
    def has_risky_args(self, args: Iterable[str]) -> bool:
        return self.find_risky_arg(args) is not None
    
    def is_denied_base(self, base: str) -> bool:
        return base in self.dangerous_bases
    
    def evaluate(self, invocation: Invocation) -> GateResult:
        """Evaluate whether ``invocation`` is eligible for correction.
        
        Args:
            invocation: The command a strategy wants to correct
        
        Returns:
            GateResult with the matched rule, if any
        """
        risky = self.find_risky_arg(invocation.args)
        if risky:
            arg, rule = risky
            return GateResult(
                allowed=False,
                rule=rule,
                message=f"Risky argument '{arg}': {rule.description}",
            )
        return GateResult(allowed=True, message="No risky arguments")
    
    def permits(self, proposal: CorrectionProposal) -> bool:
        """Check a proposal against the denylist and the risky-argument rules."""
        if self.is_denied_base(proposal.invocation.base):
            logger.debug(f"Suppressed correction to denylisted base '{proposal.invocation.base}'")
            return False
        for invocation in (proposal.original, proposal.invocation):
            result = self.evaluate(invocation)
            if not result.allowed:
                logger.debug(f"Suppressed correction of '{proposal.original}': {result.message}")
                return False
        return True
    
    def add_rule(self, rule: ArgumentRule) -> None:
        """Add a custom rule to the gate."""
        self._rules.append(rule)
    
    def remove_rule(self, name: str) -> bool:
        """Remove a rule by name."""
        for i, rule in enumerate(self._rules):
            if rule.name == name:
                self._rules.pop(i)
                return True
        return False
    
    def list_rules(self) -> list[ArgumentRule]:
        """List all loaded rules."""
        return self._rules.copy()


_DEFAULT_GATE = SafetyGate()


def has_risky_args(args: Iterable[str]) -> bool:
    """True if any argument is a destructive flag under the built-in rules."""
    return _DEFAULT_GATE.has_risky_args(args)
