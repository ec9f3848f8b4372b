"""Built-in formations and plays."""

from typing import Dict

from .models import RouteSpec

# Pro set, no routes drawn yet
DEFAULT_ROUTE_DATA = {
    "LT": {"start": [200, 540], "waypoints": []},
    "LG": {"start": [240, 540], "waypoints": []},
    "C": {"start": [280, 540], "waypoints": []},
    "RG": {"start": [320, 540], "waypoints": []},
    "RT": {"start": [360, 540], "waypoints": []},
    "QB": {"start": [280, 580], "waypoints": []},
    "RB": {"start": [320, 580], "waypoints": []},
    "TE": {"start": [420, 540], "waypoints": []},
    "WR1": {"start": [520, 540], "waypoints": []},
    "WR2": {"start": [80, 540], "waypoints": []},
    "WR3": {"start": [10, 540], "waypoints": []},
}

VERTS_ROUTE_DATA = {
    "LT": {"start": [233, 540], "waypoints": []},
    "LG": {"start": [266, 540], "waypoints": []},
    "C": {"start": [300, 540], "waypoints": []},
    "RG": {"start": [333, 540], "waypoints": []},
    "RT": {"start": [366, 540], "waypoints": []},
    "QB": {"start": [300, 570], "waypoints": []},
    "RB": {"start": [260, 570], "waypoints": [[210, 470, 2500], [10, 420, 5000]]},
    "TE": {"start": [140, 540], "waypoints": [[150, 390, 2000], [0, 290, 5000]]},
    "WR1": {"start": [400, 540], "waypoints": [[390, 490, 500], [90, 480, 3500], [100, -20, 5000]]},
    "WR2": {"start": [60, 540], "waypoints": [[70, 240, 3000], [470, 140, 5000]]},
    "WR3": {"start": [433, 540], "waypoints": [[423, 340, 2000], [223, 240, 5000]]},
}

SLANTS_ROUTE_DATA = {
    **DEFAULT_ROUTE_DATA,
    "RB": {"start": [320, 580], "waypoints": [[380, 560, 800], [460, 500, 2200]]},
    "TE": {"start": [420, 540], "waypoints": [[420, 470, 1200], [330, 400, 2800]]},
    "WR1": {"start": [520, 540], "waypoints": [[520, 490, 900], [400, 400, 2600], [330, 330, 3600]]},
    "WR2": {"start": [80, 540], "waypoints": [[80, 490, 900], [200, 400, 2600], [270, 330, 3600]]},
    "WR3": {"start": [10, 540], "waypoints": [[40, 400, 2000], [40, 200, 4000]]},
}

BUILTIN_PLAYS: Dict[str, dict] = {
    "Default": DEFAULT_ROUTE_DATA,
    "Verts": VERTS_ROUTE_DATA,
    "Slants": SLANTS_ROUTE_DATA,
}


def builtin_route_spec(name: str) -> RouteSpec:
    """Fresh RouteSpec for a built-in play; raises KeyError for unknown names."""
    return RouteSpec.model_validate(BUILTIN_PLAYS[name])
