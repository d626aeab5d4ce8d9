from __future__ import annotations

from typing import Iterable

from apibench.errors import SetupError
from apibench.scenarios.base import Scenario
from apibench.scenarios.catalog import builtin_scenarios


def scenarios_for(names: Iterable[str] | None = None) -> list[Scenario]:
    catalog = {scenario.name: scenario for scenario in builtin_scenarios()}
    if names is None:
        return list(catalog.values())
    selected: list[Scenario] = []
    for name in names:
        if name not in catalog:
            known = ", ".join(sorted(catalog))
            msg = f"Unknown scenario: {name} (known: {known})"
            raise SetupError(msg)
        if catalog[name] not in selected:
            selected.append(catalog[name])
    return selected
