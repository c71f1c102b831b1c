from dataclasses import dataclass
from typing import Optional, Tuple, Iterator
from enum import Enum

from .errors import ConfigurationError


class SubnetType(Enum):
    PUBLIC = "public"
    PRIVATE_WITH_EGRESS = "private_with_egress"
    PRIVATE_ISOLATED = "private_isolated"


class RemovalPolicy(Enum):
    RETAIN = "retain"
    DESTROY = "destroy"


class ListenerProtocol(Enum):
    HTTP = "HTTP"
    HTTPS = "HTTPS"


@dataclass(frozen=True)
class NetworkContext:
    """
    Reference to an already provisioned virtual network.
    Only its structural presence is checked, never its reachability.
    """
    vpc_id: str
    name: str = "Vpc"

    def __post_init__(self):
        if not self.vpc_id or not isinstance(self.vpc_id, str):
            raise ConfigurationError("Network context requires a non-empty vpc_id.")


@dataclass(frozen=True)
class Reference:
    """
    Attribute of a described resource that only exists once the resource is
    provisioned (DNS names, URIs).
    """
    logical_id: str
    attribute: str

    def __str__(self):
        return f"${{{self.logical_id}.{self.attribute}}}"


@dataclass(frozen=True)
class ClusterDescriptor:
    logical_id: str
    cluster_name: str
    network: NetworkContext


@dataclass(frozen=True)
class LogSink:
    stream_prefix: str
    retention_days: int

    def __post_init__(self):
        if self.retention_days < 1:
            raise ConfigurationError("Log retention must be at least one day.")


@dataclass(frozen=True)
class ContainerSpec:
    name: str
    image: str
    container_port: int
    log_sink: LogSink

    def __post_init__(self):
        if not self.name or not self.image:
            raise ConfigurationError("Container name and image are required.")


@dataclass(frozen=True)
class TaskTemplate:
    """
    Sizing, image and logging shared by every service that runs it.
    """
    logical_id: str
    cpu: int                       # CPU units, 1024 == one vCPU
    memory_mib: int
    container: ContainerSpec

    def __post_init__(self):
        if self.cpu < 1 or self.memory_mib < 1:
            raise ConfigurationError("Task CPU and memory must be positive.")


@dataclass(frozen=True)
class HealthCheck:
    path: str = "/"
    healthy_http_codes: str = "200"


@dataclass(frozen=True)
class TargetGroupDescriptor:
    logical_id: str
    port: int
    health_check: HealthCheck


@dataclass(frozen=True)
class LoadBalancerDescriptor:
    logical_id: str
    public: bool
    listener_port: int
    protocol: ListenerProtocol
    redirect_http: bool
    dns_name: Reference
    certificate_arn: Optional[str] = None


@dataclass(frozen=True)
class PublicServiceDescriptor:
    logical_id: str
    cluster: ClusterDescriptor
    task_template: TaskTemplate
    assign_public_ip: bool
    subnet_type: SubnetType
    health_check_grace_period: int     # seconds
    desired_count: int
    load_balancer: LoadBalancerDescriptor
    target_group: TargetGroupDescriptor


@dataclass(frozen=True)
class PrivateServiceDescriptor:
    logical_id: str
    cluster: ClusterDescriptor
    task_template: TaskTemplate
    assign_public_ip: bool
    subnet_type: SubnetType
    desired_count: int


@dataclass(frozen=True)
class RegistryDescriptor:
    logical_id: str
    repository_name: str
    removal_policy: RemovalPolicy
    image_scan_on_push: bool
    uri: Reference


@dataclass(frozen=True)
class OutputBinding:
    name: str
    value: Reference
    description: str


@dataclass(frozen=True)
class ResourceGraph:
    """
    Immutable result of one assembly: five descriptors plus the named
    outputs exposed for operators once the stack is provisioned.
    """
    identity: str
    cluster: ClusterDescriptor
    task_template: TaskTemplate
    public_service: PublicServiceDescriptor
    private_service: PrivateServiceDescriptor
    registry: RegistryDescriptor
    outputs: Tuple[OutputBinding, ...] = ()

    def __post_init__(self):
        # Both services run one shared template on one shared cluster
        if not (self.public_service.task_template is self.private_service.task_template
                is self.task_template):
            raise ConfigurationError("Public and private services must share the graph's task template.")
        if not (self.public_service.cluster is self.private_service.cluster is self.cluster):
            raise ConfigurationError("Public and private services must share the graph's cluster.")

    def resources(self) -> Iterator[Tuple[str, object]]:
        """Yield (kind, descriptor) pairs in assembly order."""
        yield "cluster", self.cluster
        yield "task_template", self.task_template
        yield "public_service", self.public_service
        yield "private_service", self.private_service
        yield "registry", self.registry

    def output(self, name: str) -> OutputBinding:
        for binding in self.outputs:
            if binding.name == name:
                return binding
        raise KeyError(name)
