from __future__ import annotations

from apibench.scenarios.base import Scenario
from apibench.scenarios.catalog import builtin_scenarios, default_targets
from apibench.scenarios.factory import scenarios_for

__all__ = ["Scenario", "builtin_scenarios", "default_targets", "scenarios_for"]
