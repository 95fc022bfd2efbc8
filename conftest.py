"""Global test configuration.

Shared fixtures for building credentials and capturing task status without
touching gcloud or the network.
"""

import pytest

from stratus.domain.entities.named_credential import NamedCredential
from stratus.domain.value_objects.credential_source import ProjectDefaultCredentials
from stratus.infrastructure.repositories.task_repository import InMemoryTaskRepository


@pytest.fixture
def credential():
    return NamedCredential(
        name="my-account",
        environment="prod",
        account_type="prod",
        project="my-project",
        region="europe-west1",
        source=ProjectDefaultCredentials(project="my-project"),
    )


@pytest.fixture
def task_repository():
    return InMemoryTaskRepository()
