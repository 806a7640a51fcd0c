"""
meshguard/scenarios
Built-in scenarios and the policy templates they apply (testdata/).
"""

from typing import Dict, List

from meshguard.errors import ConfigError, ErrorCode
from meshguard.runner.scenario import Scenario

from . import ingress_authn, jwt_authn, request_authn

SCENARIOS: Dict[str, Scenario] = {
    s.name: s for s in (jwt_authn.SCENARIO, request_authn.SCENARIO, ingress_authn.SCENARIO)
}


def get_scenario(name: str) -> Scenario:
    try:
        return SCENARIOS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown scenario {name!r}",
            details={"known": sorted(SCENARIOS)},
            code=ErrorCode.CONFIG_UNKNOWN_SCENARIO,
        ) from None


def list_scenarios() -> List[Scenario]:
    return list(SCENARIOS.values())
