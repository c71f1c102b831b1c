import pytest

from reelstack.assembler import assemble
from reelstack.errors import ConfigurationError
from reelstack.models import (
    ClusterDescriptor,
    ListenerProtocol,
    NetworkContext,
    PrivateServiceDescriptor,
    PublicServiceDescriptor,
    RegistryDescriptor,
    RemovalPolicy,
    SubnetType,
    TaskTemplate,
)


def test_graph_contains_one_of_each_kind(graph):
    kinds = [kind for kind, _ in graph.resources()]
    assert kinds == ["cluster", "task_template", "public_service", "private_service", "registry"]

    types = [type(descriptor) for _, descriptor in graph.resources()]
    assert types == [ClusterDescriptor, TaskTemplate, PublicServiceDescriptor,
                     PrivateServiceDescriptor, RegistryDescriptor]


def test_services_share_task_template_and_cluster(graph):
    assert graph.public_service.task_template is graph.task_template
    assert graph.private_service.task_template is graph.task_template
    assert graph.public_service.cluster is graph.cluster
    assert graph.private_service.cluster is graph.cluster


def test_assembly_is_deterministic(network):
    first = assemble("prod", network)
    second = assemble("prod", NetworkContext("vpc-0abc1234"))
    assert first == second
    assert first is not second


def test_prod_scenario(graph):
    service = graph.public_service
    health = service.target_group.health_check
    assert health.path == "/api/v1/health"
    assert health.healthy_http_codes == "200"
    assert service.health_check_grace_period == 60
    assert service.desired_count == 1


def test_public_service_networking(graph):
    service = graph.public_service
    assert service.assign_public_ip is True
    assert service.subnet_type is SubnetType.PUBLIC
    lb = service.load_balancer
    assert lb.public is True
    assert lb.listener_port == 443
    assert lb.protocol is ListenerProtocol.HTTPS
    assert lb.redirect_http is True
    assert lb.certificate_arn is None


def test_private_service_networking(graph):
    service = graph.private_service
    assert service.assign_public_ip is False
    assert service.subnet_type is SubnetType.PRIVATE_WITH_EGRESS
    assert service.desired_count == 1


def test_task_template_sizing_and_logging(graph):
    task = graph.task_template
    assert (task.cpu, task.memory_mib) == (256, 512)
    assert task.container.image == "hello-world"
    assert task.container.log_sink.stream_prefix == "NestJsApp"
    assert task.container.log_sink.retention_days == 7


def test_resource_names(graph, network):
    assert graph.cluster.cluster_name == "ReelQuotesCluster"
    assert graph.cluster.network == network
    assert graph.registry.repository_name == "reelquotes-main-api"


@pytest.mark.parametrize("identity", ["prod", "staging", "dev-42"])
def test_registry_always_retained_and_scanned(identity, network):
    registry = assemble(identity, network).registry
    assert registry.removal_policy is RemovalPolicy.RETAIN
    assert registry.image_scan_on_push is True


def test_outputs(graph):
    assert [o.name for o in graph.outputs] == ["MainApiALBDns", "MainApiEcrRepoUri"]

    dns = graph.output("MainApiALBDns")
    assert dns.value == graph.public_service.load_balancer.dns_name
    assert dns.description == "Public DNS name of the Application Load Balancer for the main API"

    uri = graph.output("MainApiEcrRepoUri")
    assert uri.value == graph.registry.uri
    assert uri.description == "ECR repository URI for reelquotes-main-api"


def test_missing_network_context_fails():
    with pytest.raises(ConfigurationError):
        assemble("prod", None)


def test_wrong_network_type_fails():
    with pytest.raises(ConfigurationError):
        assemble("prod", "vpc-0abc1234")


def test_empty_identity_fails(network):
    with pytest.raises(ConfigurationError):
        assemble("", network)


def test_image_and_certificate_overrides(network):
    graph = assemble("prod", network, image="123.dkr.ecr/reelquotes-main-api:1.0",
                     certificate_arn="arn:aws:acm:eu-west-1:123:certificate/abc")
    assert graph.task_template.container.image == "123.dkr.ecr/reelquotes-main-api:1.0"
    assert graph.public_service.load_balancer.certificate_arn.endswith("certificate/abc")
