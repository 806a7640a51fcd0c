from .models import CallResponse, ProbeResult
from .harness import CallSurface, Probe
from .transport import HttpCallSurface, parse_reflected_headers
from .mesh import MeshProbe
from .edge import EdgeGateway, EdgeProbe

__all__ = [
    "CallResponse",
    "CallSurface",
    "EdgeGateway",
    "EdgeProbe",
    "HttpCallSurface",
    "MeshProbe",
    "Probe",
    "ProbeResult",
    "parse_reflected_headers",
]
