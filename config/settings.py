import os
from pathlib import Path

# -----------------------------
# Base paths
# -----------------------------
BASE_DIR = Path(__file__).resolve().parent.parent  # project root: vm-provisioner/

# -----------------------------
# Logging
# -----------------------------
# Unset -> log to stderr (Cloud Run / Cloud Functions collect it)
LOG_FILE = os.getenv("LOG_FILE") or None
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# -----------------------------
# Google Cloud target
# -----------------------------
GCP_PROJECT_ID = os.getenv("GCP_PROJECT_ID", "unnati-cloud-labs")
GCP_ZONE = os.getenv("GCP_ZONE", "us-central1-a")
GCP_NETWORK = os.getenv("GCP_NETWORK", "default")

# region hosting the notifyVMReady function
NOTIFY_REGION = os.getenv("NOTIFY_REGION", "us-central1")
NOTIFY_VM_READY_URL = (
    f"https://{NOTIFY_REGION}-{GCP_PROJECT_ID}.cloudfunctions.net/notifyVMReady"
)

# -----------------------------
# Lab VM shape (fixed)
# -----------------------------
MACHINE_TYPE = "e2-standard-2"
DISK_SIZE_GB = 20

LAB_NETWORK_TAG = "unnati-lab"
HTTP_SERVER_TAG = "http-server"

ACCESS_CONFIG_NAME = "External NAT"
ACCESS_CONFIG_TYPE = "ONE_TO_ONE_NAT"

MANAGED_BY_LABEL = "lab-vm-provisioner"

# -----------------------------
# Metrics / monitoring
# -----------------------------
METRICS_ENABLED = os.getenv("METRICS_ENABLED", "true").lower() == "true"
