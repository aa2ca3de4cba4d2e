from typing import Any, Dict, Optional

from google.cloud import compute_v1

from config.settings import (
    GCP_PROJECT_ID,
    GCP_ZONE,
    GCP_NETWORK,
    MACHINE_TYPE,
    DISK_SIZE_GB,
    LAB_NETWORK_TAG,
    HTTP_SERVER_TAG,
    ACCESS_CONFIG_NAME,
    ACCESS_CONFIG_TYPE,
    MANAGED_BY_LABEL,
)
from core.logger import log_event
from core.os_images import (
    image_family_for,
    image_project_for,
    instance_name_for,
    os_slug,
    source_image_for,
    startup_script_for,
)


class ProvisioningError(RuntimeError):
    """Compute Engine returned something the provisioning flow cannot use."""


class VMController:
    """
    Lab VM operations on Google Compute Engine.

    Wraps a compute_v1.InstancesClient. The client is built once per
    process (see main.get_vm_controller) and holds no per-request state,
    so one controller is shared across requests. Tests pass their own
    client double.
    """

    def __init__(
        self,
        client: Optional[compute_v1.InstancesClient] = None,
        project: str = GCP_PROJECT_ID,
        zone: str = GCP_ZONE,
        network: str = GCP_NETWORK,
    ) -> None:
        self.client = client if client is not None else compute_v1.InstancesClient()
        self.project = project
        self.zone = zone
        self.network = network
        log_event(
            f"[compute] Controller ready for project={project}, zone={zone}, network={network}"
        )

    # ------------------------------------------------------------------
    # Instance resource
    # ------------------------------------------------------------------
    def build_instance(
        self,
        name: str,
        os_type: str,
        session_id: str,
        user_id: str,
    ) -> compute_v1.Instance:
        """
        Fixed lab shape: e2-standard-2, 20 GB boot disk, spot scheduling,
        one NIC with an ephemeral external address.
        """
        slug = os_slug(os_type)

        disk = compute_v1.AttachedDisk(
            auto_delete=True,
            boot=True,
            initialize_params=compute_v1.AttachedDiskInitializeParams(
                source_image=source_image_for(os_type),
                disk_size_gb=DISK_SIZE_GB,
            ),
        )

        nic = compute_v1.NetworkInterface(
            network=f"global/networks/{self.network}",
            access_configs=[
                compute_v1.AccessConfig(
                    name=ACCESS_CONFIG_NAME,
                    type_=ACCESS_CONFIG_TYPE,
                )
            ],
        )

        return compute_v1.Instance(
            name=name,
            machine_type=f"zones/{self.zone}/machineTypes/{MACHINE_TYPE}",
            disks=[disk],
            network_interfaces=[nic],
            tags=compute_v1.Tags(
                items=[LAB_NETWORK_TAG, HTTP_SERVER_TAG, f"os-{slug}", f"user-{user_id}"]
            ),
            labels={"managed-by": MANAGED_BY_LABEL, "os": slug},
            metadata=compute_v1.Metadata(
                items=[
                    compute_v1.Items(key="sessionId", value=session_id),
                    compute_v1.Items(key="startup-script", value=startup_script_for(os_type)),
                ]
            ),
            scheduling=compute_v1.Scheduling(
                provisioning_model="SPOT",
                preemptible=True,
                instance_termination_action="STOP",
                automatic_restart=False,
                on_host_maintenance="TERMINATE",
            ),
        )

    # ------------------------------------------------------------------
    # Provider calls
    # ------------------------------------------------------------------
    def create_vm(self, instance: compute_v1.Instance):
        log_event(
            f"[compute] Inserting instance '{instance.name}' "
            f"(machine={MACHINE_TYPE}, zone={self.zone})"
        )
        return self.client.insert(
            project=self.project,
            zone=self.zone,
            instance_resource=instance,
        )

    def wait_for_operation(self, operation, name: str) -> Any:
        """
        Block until the zonal operation is done. No timeout here: a stalled
        operation is bounded only by the platform's request deadline.
        """
        result = operation.result()

        if getattr(operation, "error_code", None):
            log_event(
                f"[compute] Operation for '{name}' failed: "
                f"[{operation.error_code}] {operation.error_message}"
            )
            raise operation.exception() or ProvisioningError(
                f"Operation for instance '{name}' failed: {operation.error_message}"
            )

        for warning in getattr(operation, "warnings", None) or []:
            log_event(f"[compute] Warning for '{name}': {warning.code}: {warning.message}")

        return result

    def get_external_ip(self, name: str) -> str:
        instance = self.client.get(project=self.project, zone=self.zone, instance=name)
        try:
            nat_ip = instance.network_interfaces[0].access_configs[0].nat_i_p
        except IndexError as e:
            raise ProvisioningError(
                f"Instance '{name}' has no external access config"
            ) from e

        if not nat_ip:
            raise ProvisioningError(f"Instance '{name}' has no external IP assigned")
        return nat_ip

    # ------------------------------------------------------------------
    # Public flow
    # ------------------------------------------------------------------
    def provision(self, session_id: str, os_type: str, user_id: str) -> Dict[str, Any]:
        """
        Create a lab VM and wait for its external address.

        A failure after the insert leaves the instance in place.
        """
        name = instance_name_for(os_type, session_id)
        log_event(
            f"[compute] Provisioning '{name}' for session={session_id}, user={user_id}, "
            f"image={image_project_for(os_type)}/{image_family_for(os_type)}"
        )

        instance = self.build_instance(
            name=name,
            os_type=os_type,
            session_id=session_id,
            user_id=user_id,
        )
        operation = self.create_vm(instance)
        self.wait_for_operation(operation, name)

        external_ip = self.get_external_ip(name)
        log_event(f"[compute] Instance '{name}' is up at {external_ip}")
        return {
            "name": name,
            "external_ip": external_ip,
            "zone": self.zone,
            "project": self.project,
        }
