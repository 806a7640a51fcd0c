# ============================================================================
# meshguard/base/config.py
# Harness Configuration Management
# ============================================================================
#
# PURPOSE:
# Defines every tunable of the harness: retry window, transport timeouts,
# where the mesh lives, how the edge gateway is found and where fixture
# tokens come from.
#
# KEY CONCEPTS:
# 1. Frozen dataclasses: each section is immutable once built
# 2. Environment variables: MESHGUARD_* overrides, read by from_env()
# 3. One shared instance: get_config() / set_config()
#
# ============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar

from meshguard.errors import ConfigError

logger = logging.getLogger(__name__)

T = TypeVar("T", int, float)


def _env_number(name: str, default: str, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(
            f"{name} must be a number, got {raw!r}",
            details={"variable": name, "value": raw},
        ) from None


# ============================================================================
# Retry Window
# ============================================================================
# Policy propagation is asynchronous, so every assertion is retried until a
# deadline.

@dataclass(frozen=True)
class RetryConfig:
    # Pause between two attempts of the same case (seconds)
    delay_seconds: float = 0.25

    # Overall deadline per case, measured from the first attempt (seconds)
    timeout_seconds: float = 30.0


# ============================================================================
# Transport
# ============================================================================

@dataclass(frozen=True)
class TransportConfig:
    # Per-request timeout. A hung probe still counts against the case deadline.
    request_timeout: float = 5.0

    # Test meshes usually run self-signed certificates
    verify_tls: bool = False


# ============================================================================
# Mesh Location
# ============================================================================

@dataclass(frozen=True)
class MeshConfig:
    # Tenant namespace holding the test workloads (created externally)
    namespace: str = ""

    # Mesh root namespace; policies applied here are global
    root_namespace: str = "istio-system"

    cluster_domain: str = "cluster.local"

    # kubectl binary and optional context used by the cluster adapters
    kubectl: str = "kubectl"
    kube_context: Optional[str] = None

    # Outbound proxy of the calling workload; calls issued "from" a workload go
    # through it so the mesh sees that workload's identity
    source_proxy: Optional[str] = None


# ============================================================================
# Edge Gateway
# ============================================================================

@dataclass(frozen=True)
class EdgeConfig:
    # Static host[:port] override; when empty the ingress Service is queried
    address: str = ""
    service: str = "istio-ingressgateway"
    namespace: str = "istio-system"
    port: int = 80


@dataclass(frozen=True)
class TokenConfig:
    # JSON file with issuer1/issuer2/expired/invalid entries
    path: Optional[str] = None


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ============================================================================
# Master Configuration Container
# ============================================================================

@dataclass(frozen=True)
class MeshGuardConfig:
    retry: RetryConfig = field(default_factory=RetryConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    mesh: MeshConfig = field(default_factory=MeshConfig)
    edge: EdgeConfig = field(default_factory=EdgeConfig)
    tokens: TokenConfig = field(default_factory=TokenConfig)
    log: LogConfig = field(default_factory=LogConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "MeshGuardConfig":
        retry = RetryConfig(
            delay_seconds=_env_number("MESHGUARD_RETRY_DELAY", "0.25", float),
            timeout_seconds=_env_number("MESHGUARD_RETRY_TIMEOUT", "30", float),
        )

        transport = TransportConfig(
            request_timeout=_env_number("MESHGUARD_REQUEST_TIMEOUT", "5", float),
            verify_tls=os.getenv("MESHGUARD_VERIFY_TLS", "false").lower() == "true",
        )

        mesh = MeshConfig(
            namespace=os.getenv("MESHGUARD_NAMESPACE", ""),
            root_namespace=os.getenv("MESHGUARD_ROOT_NAMESPACE", "istio-system"),
            cluster_domain=os.getenv("MESHGUARD_CLUSTER_DOMAIN", "cluster.local"),
            kubectl=os.getenv("MESHGUARD_KUBECTL", "kubectl"),
            # Empty string means "current context"
            kube_context=os.getenv("MESHGUARD_KUBE_CONTEXT") or None,
            source_proxy=os.getenv("MESHGUARD_SOURCE_PROXY") or None,
        )

        edge = EdgeConfig(
            address=os.getenv("MESHGUARD_EDGE_ADDRESS", ""),
            service=os.getenv("MESHGUARD_EDGE_SERVICE", "istio-ingressgateway"),
            namespace=os.getenv("MESHGUARD_EDGE_NAMESPACE", "istio-system"),
            port=_env_number("MESHGUARD_EDGE_PORT", "80", int),
        )

        tokens = TokenConfig(path=os.getenv("MESHGUARD_TOKENS_FILE") or None)

        log = LogConfig(level=os.getenv("MESHGUARD_LOG_LEVEL", "INFO"))

        return cls(
            retry=retry,
            transport=transport,
            mesh=mesh,
            edge=edge,
            tokens=tokens,
            log=log,
            debug=os.getenv("MESHGUARD_DEBUG", "false").lower() == "true",
        )


# ============================================================================
# Global Configuration Singleton
# ============================================================================

_config: Optional[MeshGuardConfig] = None


def get_config() -> MeshGuardConfig:
    """
    Get the global configuration instance, loading it from the environment
    on first use.
    """
    global _config
    if _config is None:
        _config = MeshGuardConfig.from_env()
    return _config


def set_config(config: Optional[MeshGuardConfig]) -> None:
    """
    Replace the global configuration (mainly used by the CLI and tests).
    Passing None forces the next get_config() to re-read the environment.
    """
    global _config
    _config = config


def setup_logging(config: Optional[MeshGuardConfig] = None) -> None:
    """
    Configure Python's logging system based on our settings.
    Call this once at process startup.
    """
    cfg = config or get_config()
    level = "DEBUG" if cfg.debug else cfg.log.level.upper()

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
    logger.debug("Logging configured at %s", level)
