"""Which rules can be fixed automatically, and by what."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Protocol


class FixabilityProvider(Protocol):
    """Source of the processor identifiers a fixer can rewrite."""

    def fixable_rules(self) -> FrozenSet[str]:
        """Return identifiers of processors whose findings are fixable."""


class StaticFixability:
    """Fixable rule set known up front, typically read from the configuration file."""

    def __init__(self, rules: Iterable[str] = ()) -> None:
        self._rules = frozenset(rules)

    def fixable_rules(self) -> FrozenSet[str]:
        return self._rules


@dataclass(frozen=True)
class ExternalTool:
    tool: str
    command: str
    description: str


EXTERNAL_TOOL_MAPPINGS: Dict[str, ExternalTool] = {
    "magento.code.useless-object-manager-import": ExternalTool(
        tool="php-cs-fixer",
        command="php-cs-fixer fix --rules=no_unused_imports",
        description="unused imports",
    ),
}


def is_externally_fixable(rule_id: str) -> bool:
    return rule_id in EXTERNAL_TOOL_MAPPINGS


def external_tool_for(rule_id: str) -> Optional[ExternalTool]:
    return EXTERNAL_TOOL_MAPPINGS.get(rule_id)
