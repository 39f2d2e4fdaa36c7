"""Preflight checks for running hello-service on this host."""

from __future__ import annotations

import socket
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from hello_service.config import ServiceConfig, validate_config
from hello_service.errors import ConfigurationError

MIN_PYTHON = (3, 10)


@dataclass
class DoctorResult:
    ok: bool
    messages: List[str]


def _python_version_tuple() -> Tuple[int, int, int]:
    v = sys.version_info
    return (v.major, v.minor, v.micro)


def _check_python_version(errors: List[str]) -> None:
    current = _python_version_tuple()
    if current[:2] < MIN_PYTHON:
        errors.append(
            f"Python {current[0]}.{current[1]} is unsupported. "
            f"Use Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]} or newer."
        )


def _check_config(config: ServiceConfig, errors: List[str]) -> bool:
    try:
        validate_config(config)
    except ConfigurationError as exc:
        errors.append(f"Invalid configuration: {exc}.")
        return False
    return True


def _check_port_binding(host: str, port: int, label: str, errors: List[str]) -> None:
    bind_host = "127.0.0.1" if host in {"0.0.0.0", "localhost", ""} else host
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((bind_host, port))
    except OSError as exc:
        errors.append(
            f"{label} port conflict: cannot bind {bind_host}:{port} ({exc}). "
            "Stop the process holding the port before starting the service."
        )
    finally:
        sock.close()


def _check_collector(
    config: ServiceConfig,
    warnings: List[str],
    resolve: Callable[[str, int], object],
) -> None:
    host, _, raw_port = config.collector_endpoint.rpartition(":")
    if not host:
        host, raw_port = raw_port, "4318"

    try:
        resolve(host, int(raw_port))
    except (OSError, ValueError) as exc:
        warnings.append(
            f"Collector `{config.collector_endpoint}` does not resolve ({exc}). "
            "Spans will be dropped by the exporter until it is reachable."
        )


def run_doctor(
    config: Optional[ServiceConfig] = None,
    resolve: Callable[[str, int], object] = socket.getaddrinfo,
) -> DoctorResult:
    config = config or ServiceConfig()
    errors: List[str] = []
    warnings: List[str] = []

    _check_python_version(errors)
    if _check_config(config, errors):
        _check_port_binding(config.host, config.app_port, "Application", errors)
        _check_port_binding(config.host, config.metrics_port, "Metrics", errors)
        _check_collector(config, warnings, resolve)

    messages: List[str] = []
    if errors:
        messages.append("Doctor found configuration issues:")
        for i, msg in enumerate(errors, 1):
            messages.append(f"{i}. {msg}")
        messages.append("Fix the items above and rerun `python -m scripts.doctor`.")
    else:
        messages.append("Doctor checks passed.")

    if warnings:
        messages.append("Warnings:")
        for i, msg in enumerate(warnings, 1):
            messages.append(f"- {msg}")

    return DoctorResult(ok=not errors, messages=messages)


def main() -> int:
    result = run_doctor()
    print("\n".join(result.messages))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
