"""Emitters reporting the compliance of policies outside of the cluster status.

Controllers call an emitter only when `PolicyCoreStatus.update_condition`
reports a change.
"""

from .k8s_emitter import K8sEmitter
from .prometheus_emitter import MetricsRegistry, PrometheusEmitter

__all__ = [
    "K8sEmitter",
    "MetricsRegistry",
    "PrometheusEmitter",
]
