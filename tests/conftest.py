from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from google.cloud import compute_v1

from core.vm_controller import VMController
from main import app, get_vm_controller

FAKE_IP = "34.1.2.3"


def make_instance(nat_ip: str = FAKE_IP) -> compute_v1.Instance:
    return compute_v1.Instance(
        network_interfaces=[
            compute_v1.NetworkInterface(
                access_configs=[compute_v1.AccessConfig(nat_i_p=nat_ip)]
            )
        ]
    )


@pytest.fixture
def operation():
    op = MagicMock()
    op.result.return_value = None
    op.error_code = 0
    op.error_message = ""
    op.warnings = []
    return op


@pytest.fixture
def compute_client(operation):
    client = MagicMock()
    client.insert.return_value = operation
    client.get.return_value = make_instance()
    return client


@pytest.fixture
def controller(compute_client):
    return VMController(
        client=compute_client,
        project="test-project",
        zone="europe-west1-b",
        network="lab-net",
    )


@pytest.fixture
def api(controller):
    app.dependency_overrides[get_vm_controller] = lambda: controller
    yield TestClient(app)
    app.dependency_overrides.clear()
