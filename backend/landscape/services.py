from __future__ import annotations

from dataclasses import dataclass

from landscape.infra.communication import (
    NoopCommunicationAdapter,
    TwilioCommunicationAdapter,
    resolve_communication_adapter,
)
from landscape.infra.metrics import Metrics, configure_metrics


@dataclass
class AppServices:
    """Typed container for runtime services stored on `app.state.services`."""

    communication_adapter: TwilioCommunicationAdapter | NoopCommunicationAdapter
    metrics: Metrics


def build_app_services(app_settings, *, metrics: Metrics | None = None) -> AppServices:
    metrics_client = metrics or configure_metrics(app_settings.metrics_enabled)
    return AppServices(
        communication_adapter=resolve_communication_adapter(app_settings),
        metrics=metrics_client,
    )
