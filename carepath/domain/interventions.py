"""Intervention Rule Engine.

Transforms a patient's historical records into an ordered list of intervention
recommendations by running a pipeline of independent rule evaluators.

Usage:
    from carepath.domain.interventions import InterventionEngine

    engine = InterventionEngine()
    for intervention in engine.generate(records):
        print(intervention)

Adding a rule:
    1. Write ``rule(records) -> list[str]`` in ``intervention_rules.py``
       (or build one with a factory there).
    2. Pass it to ``InterventionEngine(rules=...)`` or call ``engine.register(rule)``.
    Existing rules are untouched; outputs are concatenated in registration order.
"""

import logging
from typing import Iterable, Optional, Sequence

from carepath.domain.clinical_record import HistoricalRecord
from carepath.domain.intervention_rules import DEFAULT_RULES, InterventionRule

logger = logging.getLogger(__name__)


class InterventionEngine:
    """
    Runs registered rules over a historical-record set.

    Total (never raises) and deterministic for a fixed rule list. Holds no
    per-call state, so one engine can serve concurrent requests.
    """

    def __init__(self, rules: Optional[Iterable[InterventionRule]] = None):
        self._rules: list[InterventionRule] = list(DEFAULT_RULES if rules is None else rules)

    @property
    def rules(self) -> tuple[InterventionRule, ...]:
        return tuple(self._rules)

    def register(self, rule: InterventionRule) -> None:
        """Append a rule; it runs after every rule already registered."""
        self._rules.append(rule)

    def generate(self, records: Sequence[HistoricalRecord]) -> list[str]:
        """
        Evaluate every registered rule against the full record set.

        Args:
            records: Historical records for (typically) one patient, in the
                     order the store returned them.

        Returns:
            Interventions from each rule, concatenated in registration order.
            Empty input yields an empty list.
        """
        if not records:
            return []

        interventions: list[str] = []
        for rule in self._rules:
            name = getattr(rule, "__name__", repr(rule))
            try:
                result = rule(records)
                if isinstance(result, str):
                    result = [result]
                # Lazy results are consumed inside the guard
                produced = list(result or [])
            except Exception as exc:
                # One faulty rule must not block the others
                logger.error(f"InterventionEngine [{name}]: rule raised {exc}", exc_info=True)
                continue

            if produced:
                logger.debug(f"InterventionEngine [{name}]: {len(produced)} intervention(s)")
                interventions.extend(str(item) for item in produced)

        return interventions


_default_engine = InterventionEngine()


def generate_interventions(
    records: Sequence[HistoricalRecord],
    engine: Optional[InterventionEngine] = None,
) -> list[str]:
    """Derive interventions from history using ``engine`` or the default rule set."""
    return (engine or _default_engine).generate(records)
