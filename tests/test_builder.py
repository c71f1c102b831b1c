import pytest

from reelstack.builder import GraphBuilder, ServiceHandle
from reelstack.errors import ConfigurationError
from reelstack.models import (
    ContainerSpec,
    HealthCheck,
    ListenerProtocol,
    LogSink,
    Reference,
    SubnetType,
)


def _container():
    return ContainerSpec("app", "nginx", 80, LogSink("app", 7))


@pytest.fixture
def builder(network):
    b = GraphBuilder("test")
    b.add_cluster("Cluster", "cluster", network)
    b.add_task_template("TaskDef", 256, 512, _container())
    return b


def _complete(builder):
    handle = builder.add_public_service("Public")
    builder.add_private_service("Private")
    builder.add_registry("Registry", "repo")
    return handle


def test_identity_required():
    with pytest.raises(ConfigurationError):
        GraphBuilder("")
    with pytest.raises(ConfigurationError):
        GraphBuilder(None)


def test_cluster_requires_network():
    with pytest.raises(ConfigurationError, match="network context"):
        GraphBuilder("test").add_cluster("Cluster", "cluster", None)


def test_service_requires_cluster_and_task_template(network):
    b = GraphBuilder("test")
    with pytest.raises(ConfigurationError, match="cluster"):
        b.add_public_service("Public")
    b.add_cluster("Cluster", "cluster", network)
    with pytest.raises(ConfigurationError, match="task template"):
        b.add_private_service("Private")


def test_target_group_starts_with_default_health_check(builder):
    _complete(builder)
    graph = builder.seal()
    assert graph.public_service.target_group.health_check == HealthCheck("/", "200")
    assert graph.public_service.target_group.port == 80


def test_health_check_refinement_applies_at_seal(builder):
    handle = _complete(builder)
    builder.configure_health_check(handle, "/healthz", "200-299")
    graph = builder.seal()
    assert graph.public_service.target_group.health_check == HealthCheck("/healthz", "200-299")
    assert graph.public_service.target_group.logical_id == handle.target_group_id


def test_refinement_before_public_service_fails(builder):
    with pytest.raises(ConfigurationError, match="public service to exist"):
        builder.configure_health_check(None, "/api/v1/health")
    with pytest.raises(ConfigurationError):
        builder.configure_health_check(ServiceHandle("Public", "PublicTargetGroup"), "/api/v1/health")


def test_refinement_with_foreign_handle_fails(builder):
    _complete(builder)
    with pytest.raises(ConfigurationError, match="Unknown service handle"):
        builder.configure_health_check(ServiceHandle("Other", "OtherTargetGroup"), "/health")


def test_refinement_rejects_relative_path(builder):
    handle = _complete(builder)
    with pytest.raises(ConfigurationError, match="absolute"):
        builder.configure_health_check(handle, "health")


def test_refinement_after_seal_fails(builder):
    handle = _complete(builder)
    builder.seal()
    assert builder.sealed
    with pytest.raises(ConfigurationError, match="already sealed"):
        builder.configure_health_check(handle, "/late")
    with pytest.raises(ConfigurationError, match="already sealed"):
        builder.seal()


def test_seal_with_missing_kinds_fails(builder):
    builder.add_public_service("Public")
    with pytest.raises(ConfigurationError, match="private service, registry"):
        builder.seal()
    assert not builder.sealed


def test_duplicate_kinds_rejected(builder, network):
    _complete(builder)
    with pytest.raises(ConfigurationError):
        builder.add_cluster("Cluster2", "cluster2", network)
    with pytest.raises(ConfigurationError):
        builder.add_task_template("TaskDef2", 256, 512, _container())
    with pytest.raises(ConfigurationError):
        builder.add_public_service("Public2")
    with pytest.raises(ConfigurationError):
        builder.add_private_service("Private2")
    with pytest.raises(ConfigurationError):
        builder.add_registry("Registry2", "repo2")


def test_redirect_requires_https(builder):
    with pytest.raises(ConfigurationError, match="HTTPS"):
        builder.add_public_service("Public", redirect_http=True, protocol=ListenerProtocol.HTTP)


def test_private_service_cannot_use_public_subnets(builder):
    with pytest.raises(ConfigurationError):
        builder.add_private_service("Private", subnet_type=SubnetType.PUBLIC)


def test_outputs_unique_and_referenced(builder):
    handle = _complete(builder)
    dns = builder.load_balancer_of(handle).dns_name
    builder.add_output("Dns", dns, "dns name")
    with pytest.raises(ConfigurationError, match="already declared"):
        builder.add_output("Dns", dns, "again")
    with pytest.raises(ConfigurationError, match="reference"):
        builder.add_output("Literal", "example.com", "not a reference")
    graph = builder.seal()
    assert graph.outputs[0].value == Reference("PublicLB", "DNSName")


def test_refinement_with_non_handle_fails(builder):
    _complete(builder)
    with pytest.raises(ConfigurationError, match="Unknown service handle"):
        builder.configure_health_check("Public", "/health")


def test_refinement_rejects_missing_path(builder):
    handle = _complete(builder)
    with pytest.raises(ConfigurationError, match="absolute"):
        builder.configure_health_check(handle, None)
