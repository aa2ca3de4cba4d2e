"""VMController against a mocked InstancesClient."""

import pytest
from google.cloud import compute_v1

from core.vm_controller import ProvisioningError
from tests.conftest import FAKE_IP, make_instance


class TestBuildInstance:
    @pytest.fixture
    def instance(self, controller):
        return controller.build_instance(
            name="lab-rocky-linux-abcdef12",
            os_type="Rocky Linux",
            session_id="abcdef1234567",
            user_id="u42",
        )

    def test_machine_type_and_disk(self, instance):
        assert instance.name == "lab-rocky-linux-abcdef12"
        assert instance.machine_type == "zones/europe-west1-b/machineTypes/e2-standard-2"
        assert len(instance.disks) == 1
        disk = instance.disks[0]
        assert disk.boot and disk.auto_delete
        assert disk.initialize_params.disk_size_gb == 20
        assert (
            disk.initialize_params.source_image
            == "projects/rocky-linux-cloud/global/images/family/rocky-linux-9"
        )

    def test_single_nic_with_external_nat(self, instance):
        assert len(instance.network_interfaces) == 1
        nic = instance.network_interfaces[0]
        assert nic.network == "global/networks/lab-net"
        assert len(nic.access_configs) == 1
        assert nic.access_configs[0].name == "External NAT"
        assert nic.access_configs[0].type_ == "ONE_TO_ONE_NAT"

    def test_tags_encode_lab_os_and_user(self, instance):
        assert list(instance.tags.items) == [
            "unnati-lab",
            "http-server",
            "os-rocky-linux",
            "user-u42",
        ]

    def test_metadata_carries_session_and_startup_script(self, instance):
        items = {item.key: item.value for item in instance.metadata.items}
        assert items["sessionId"] == "abcdef1234567"
        assert items["startup-script"].startswith("#!/bin/bash")

    def test_spot_scheduling(self, instance):
        assert instance.scheduling.provisioning_model == "SPOT"
        assert instance.scheduling.preemptible is True
        assert instance.scheduling.automatic_restart is False


class TestProviderCalls:
    def test_create_vm_inserts_into_configured_zone(self, controller, compute_client):
        instance = compute_v1.Instance(name="lab-ubuntu-x")
        controller.create_vm(instance)
        compute_client.insert.assert_called_once_with(
            project="test-project",
            zone="europe-west1-b",
            instance_resource=instance,
        )

    def test_wait_raises_operation_exception(self, controller, operation):
        operation.error_code = 409
        operation.error_message = "already exists"
        operation.exception.return_value = RuntimeError("already exists")
        with pytest.raises(RuntimeError, match="already exists"):
            controller.wait_for_operation(operation, "lab-ubuntu-x")

    def test_wait_falls_back_to_provisioning_error(self, controller, operation):
        operation.error_code = 400
        operation.error_message = "bad request"
        operation.exception.return_value = None
        with pytest.raises(ProvisioningError, match="bad request"):
            controller.wait_for_operation(operation, "lab-ubuntu-x")

    def test_wait_propagates_result_errors(self, controller, operation):
        operation.result.side_effect = TimeoutError("stalled")
        with pytest.raises(TimeoutError):
            controller.wait_for_operation(operation, "lab-ubuntu-x")

    def test_external_ip_from_first_access_config(self, controller, compute_client):
        assert controller.get_external_ip("lab-ubuntu-x") == FAKE_IP
        compute_client.get.assert_called_once_with(
            project="test-project", zone="europe-west1-b", instance="lab-ubuntu-x"
        )

    def test_external_ip_missing_interface(self, controller, compute_client):
        compute_client.get.return_value = compute_v1.Instance()
        with pytest.raises(ProvisioningError, match="no external access config"):
            controller.get_external_ip("lab-ubuntu-x")

    def test_external_ip_not_assigned(self, controller, compute_client):
        compute_client.get.return_value = make_instance(nat_ip="")
        with pytest.raises(ProvisioningError, match="no external IP"):
            controller.get_external_ip("lab-ubuntu-x")


class TestProvision:
    def test_full_flow(self, controller, compute_client, operation):
        result = controller.provision(session_id="abcdef1234567", os_type="Ubuntu", user_id="u1")

        assert result == {
            "name": "lab-ubuntu-abcdef12",
            "external_ip": FAKE_IP,
            "zone": "europe-west1-b",
            "project": "test-project",
        }
        inserted = compute_client.insert.call_args.kwargs["instance_resource"]
        assert inserted.name == "lab-ubuntu-abcdef12"
        operation.result.assert_called_once_with()
        compute_client.get.assert_called_once()

    def test_insert_failure_skips_lookup(self, controller, compute_client):
        compute_client.insert.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(RuntimeError, match="quota exceeded"):
            controller.provision(session_id="abcdef1234567", os_type="Ubuntu", user_id="u1")
        compute_client.get.assert_not_called()
