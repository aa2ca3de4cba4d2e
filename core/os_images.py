"""
Static lookups that turn a requested OS name into GCE image parameters,
an instance name and the boot-time startup script.

Everything here is pure. Unknown OS names silently fall back to Ubuntu.
"""

from config.settings import NOTIFY_VM_READY_URL
from schemas.vm_schema import OsType

DEFAULT_IMAGE_PROJECT = "ubuntu-os-cloud"
DEFAULT_IMAGE_FAMILY = "ubuntu-2204-lts"

IMAGE_PROJECTS = {
    OsType.UBUNTU.value: "ubuntu-os-cloud",
    OsType.ROCKY_LINUX.value: "rocky-linux-cloud",
    OsType.OPENSUSE.value: "opensuse-cloud",
}

IMAGE_FAMILIES = {
    OsType.UBUNTU.value: "ubuntu-2204-lts",
    OsType.ROCKY_LINUX.value: "rocky-linux-9",
    OsType.OPENSUSE.value: "opensuse-leap-15-4",
}

INSTANCE_NAME_PREFIX = "lab"
SESSION_ID_CHARS = 8


def image_project_for(os_type: str) -> str:
    return IMAGE_PROJECTS.get(os_type, DEFAULT_IMAGE_PROJECT)


def image_family_for(os_type: str) -> str:
    return IMAGE_FAMILIES.get(os_type, DEFAULT_IMAGE_FAMILY)


def source_image_for(os_type: str) -> str:
    return (
        f"projects/{image_project_for(os_type)}/global/images/family/"
        f"{image_family_for(os_type)}"
    )


def os_slug(os_type: str) -> str:
    # only the first space is replaced
    return os_type.lower().replace(" ", "-", 1)


def instance_name_for(os_type: str, session_id: str) -> str:
    """
    'lab-<os slug>-<first 8 chars of session id>'.

    Uniqueness is left to Compute Engine; an existing name makes the
    insert call fail.
    """
    return f"{INSTANCE_NAME_PREFIX}-{os_slug(os_type)}-{session_id[:SESSION_ID_CHARS]}"


_STARTUP_SCRIPT_TEMPLATE = """#!/bin/bash
# Install Docker
apt-get update
apt-get install -y docker.io docker-compose

# Pull and start Apache Guacamole
mkdir -p /opt/guacamole
cd /opt/guacamole

# Create docker-compose.yml for Guacamole
cat > docker-compose.yml << 'EOL'
version: '3'
services:
  guacd:
    image: guacamole/guacd
    restart: always
  guacamole:
    image: guacamole/guacamole
    restart: always
    ports:
      - "8080:8080"
    environment:
      GUACD_HOSTNAME: guacd
      GUACAMOLE_HOME: /guacamole_home
EOL

# Start Guacamole
docker-compose up -d

# Notify service is ready
SESSION_ID=$(curl -s -H "Metadata-Flavor: Google" http://metadata.google.internal/computeMetadata/v1/instance/attributes/sessionId)
curl -X POST "{notify_url}" -H "Content-Type: application/json" -d "{{\\"sessionId\\": \\"$SESSION_ID\\", \\"status\\": \\"ready\\"}}"
"""


def startup_script_for(os_type: str, notify_url: str = NOTIFY_VM_READY_URL) -> str:
    """
    Boot script stored in the 'startup-script' metadata key.

    The script is apt based and identical for every OS type.
    """
    return _STARTUP_SCRIPT_TEMPLATE.format(notify_url=notify_url)
