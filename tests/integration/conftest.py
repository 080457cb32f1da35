# tests/integration/conftest.py - v8
"""Shared fixtures for integration tests using testcontainers.

Container lifecycle:
- session scope: containers start once per pytest session
- function scope: fresh bucket / key namespace per test for isolation

Custom container wrappers:
- Uses DockerContainer directly with bridge network IP + internal port
- Required for devcontainer with docker-outside-of-docker (socket mount)
- Built-in testcontainers library returns localhost:mapped_port which is
  unreachable from inside a devcontainer

Changelog:
    v8: Redis and MinIO containers for side-index and S3 store tests.
    v6: Bridge IP pattern for all containers.
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest

logger = logging.getLogger(__name__)


# ── Pytest markers ──────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "redis: marks tests requiring Redis container")
    config.addinivalue_line("markers", "minio: marks tests requiring MinIO container")


# =====================================================================
#  DEVCONTAINER NETWORKING HELPERS
# =====================================================================

def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries.

    In docker-outside-of-docker setups, containers are on the host Docker
    daemon. The devcontainer must access them via bridge IP, not localhost.
    """
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info(
                        "Container %s IP: %s (network: %s, attempt %d)",
                        wrapped.short_id, ip, net_name, attempt + 1,
                    )
                    return ip
            logger.debug("Container IP empty, attempt %d/%d", attempt + 1, max_attempts)
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  REDIS
# =====================================================================

REDIS_IMAGE = "redis:7-alpine"
REDIS_INTERNAL_PORT = 6379


@pytest.fixture(scope="session")
def redis_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(REDIS_IMAGE).with_exposed_ports(REDIS_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Ready to accept connections", timeout=30)

    ip = _get_container_bridge_ip(container)
    logger.info("Redis ready at %s:%d", ip, REDIS_INTERNAL_PORT)
    yield {"host": ip, "port": REDIS_INTERNAL_PORT}
    container.stop()


@pytest.fixture
def redis_url(redis_container) -> str:
    c = redis_container
    return f"redis://{c['host']}:{c['port']}/0"


# =====================================================================
#  MINIO (S3-compatible)
# =====================================================================

MINIO_IMAGE = "minio/minio:latest"
MINIO_INTERNAL_PORT = 9000
MINIO_ACCESS_KEY = "minioadmin"
MINIO_SECRET_KEY = "minioadmin"


@pytest.fixture(scope="session")
def minio_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = (
        DockerContainer(MINIO_IMAGE)
        .with_exposed_ports(MINIO_INTERNAL_PORT)
        .with_env("MINIO_ROOT_USER", MINIO_ACCESS_KEY)
        .with_env("MINIO_ROOT_PASSWORD", MINIO_SECRET_KEY)
        .with_command("server /data")
    )
    container.start()
    wait_for_logs(container, predicate=r"API:", timeout=60)
    time.sleep(1)

    ip = _get_container_bridge_ip(container)
    logger.info("MinIO ready at %s:%d", ip, MINIO_INTERNAL_PORT)
    yield {"endpoint_url": f"http://{ip}:{MINIO_INTERNAL_PORT}"}
    container.stop()


@pytest.fixture
def minio_bucket(minio_container) -> str:
    """Fresh bucket per test."""
    import boto3

    name = f"test-{uuid.uuid4().hex[:12]}"
    client = boto3.client(
        "s3",
        endpoint_url=minio_container["endpoint_url"],
        aws_access_key_id=MINIO_ACCESS_KEY,
        aws_secret_access_key=MINIO_SECRET_KEY,
        region_name="us-east-1",
    )
    client.create_bucket(Bucket=name)
    return name


@pytest.fixture
def s3_store(minio_container, minio_bucket):
    from filestorage.storage.s3_store import S3BlobStore

    return S3BlobStore(
        bucket=minio_bucket,
        region="us-east-1",
        endpoint_url=minio_container["endpoint_url"],
        access_key_id=MINIO_ACCESS_KEY,
        secret_access_key=MINIO_SECRET_KEY,
    )
