import time
from typing import Optional

from prometheus_client import Counter, Gauge, Histogram

from config.settings import GCP_PROJECT_ID, GCP_ZONE

# -----------------------------
# HTTP / API level metrics
# -----------------------------
REQUEST_COUNT = Counter(
    "vm_provisioner_requests_total",
    "Total HTTP requests to vm-provisioner",
    ["method", "endpoint"],
)

REQUEST_LATENCY = Histogram(
    "vm_provisioner_request_latency_seconds",
    "Latency of HTTP requests to vm-provisioner",
    ["endpoint"],
)


# -----------------------------
# Provisioning metrics
# -----------------------------
VM_PROVISIONED_TOTAL = Counter(
    "vm_provisioned_total",
    "Total number of lab VMs provisioned",
    ["os_type", "user"],
)

VM_PROVISION_FAILURES = Counter(
    "vm_provision_failures_total",
    "Rejected or failed provisioning requests",
    ["stage"],
)

VM_PROVISION_DURATION = Histogram(
    "vm_provision_duration_seconds",
    "Time from insert call to external IP available",
    buckets=(5, 10, 20, 30, 45, 60, 90, 120, 180, 300),
)

VM_LAST_PROVISIONED = Gauge(
    "vm_last_provisioned_timestamp",
    "UNIX timestamp of the last successful provision for a given user",
    ["user"],
)

PROVISIONER_TARGET = Gauge(
    "vm_provisioner_target",
    "Label gauge exposing the configured GCP project and zone",
    ["project", "zone"],
)


def init_static_metrics() -> None:
    PROVISIONER_TARGET.labels(project=GCP_PROJECT_ID, zone=GCP_ZONE).set(1.0)


def record_vm_provisioned(os_type: str, user: Optional[str]) -> None:
    user_label = user or "anonymous"
    VM_PROVISIONED_TOTAL.labels(os_type=os_type, user=user_label).inc()
    VM_LAST_PROVISIONED.labels(user=user_label).set(time.time())


def record_provision_failure(stage: str) -> None:
    VM_PROVISION_FAILURES.labels(stage=stage).inc()


def observe_provision_duration(seconds: float) -> None:
    VM_PROVISION_DURATION.observe(seconds)
