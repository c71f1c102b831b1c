"""
builder.py: Module for building a resource graph in two phases

Descriptors are added while the builder is open. The public service hands
back a handle through which its derived target group can still be amended;
seal() freezes everything into a ResourceGraph.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Any

from .errors import ConfigurationError
from .models import (
    ClusterDescriptor,
    ContainerSpec,
    HealthCheck,
    ListenerProtocol,
    LoadBalancerDescriptor,
    NetworkContext,
    OutputBinding,
    PrivateServiceDescriptor,
    PublicServiceDescriptor,
    Reference,
    RegistryDescriptor,
    RemovalPolicy,
    ResourceGraph,
    SubnetType,
    TargetGroupDescriptor,
    TaskTemplate,
)


@dataclass(frozen=True)
class ServiceHandle:
    """Handle to a public service that is still open for refinement."""
    logical_id: str
    target_group_id: str


class GraphBuilder:
    """
    GraphBuilder: Class responsible for collecting descriptors until sealed
    """

    def __init__(self, identity: str):
        if not identity or not isinstance(identity, str):
            raise ConfigurationError("Stack identity must be a non-empty string.")
        self.identity = identity
        self.logger = logging.getLogger("reelstack.builder")
        self._sealed = False
        self._cluster: Optional[ClusterDescriptor] = None
        self._task_template: Optional[TaskTemplate] = None
        self._public: Optional[Dict[str, Any]] = None
        self._public_handle: Optional[ServiceHandle] = None
        self._private: Optional[PrivateServiceDescriptor] = None
        self._registry: Optional[RegistryDescriptor] = None
        self._outputs: List[OutputBinding] = []

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _ensure_open(self, what: str):
        if self._sealed:
            raise ConfigurationError(f"Cannot {what}: graph '{self.identity}' is already sealed.")

    def _ensure_service_prerequisites(self, logical_id: str):
        if self._cluster is None:
            raise ConfigurationError(f"Service '{logical_id}' requires a cluster to be added first.")
        if self._task_template is None:
            raise ConfigurationError(f"Service '{logical_id}' requires a task template to be added first.")

    def add_cluster(self, logical_id: str, cluster_name: str,
                    network: Optional[NetworkContext]) -> ClusterDescriptor:
        self._ensure_open("add cluster")
        if network is None:
            raise ConfigurationError("A network context is required to build the cluster.")
        if not isinstance(network, NetworkContext):
            raise ConfigurationError(
                f"Expected a NetworkContext, got {type(network).__name__}.")
        if self._cluster is not None:
            raise ConfigurationError("The graph already contains a cluster.")
        self._cluster = ClusterDescriptor(logical_id, cluster_name, network)
        self.logger.debug(f"Added cluster {cluster_name} in {network.vpc_id}")
        return self._cluster

    def add_task_template(self, logical_id: str, cpu: int, memory_mib: int,
                          container: ContainerSpec) -> TaskTemplate:
        self._ensure_open("add task template")
        if self._task_template is not None:
            raise ConfigurationError("The graph already contains a task template.")
        self._task_template = TaskTemplate(logical_id, cpu, memory_mib, container)
        self.logger.debug(f"Added task template {logical_id} ({cpu} CPU / {memory_mib} MiB)")
        return self._task_template

    def add_public_service(self, logical_id: str, listener_port: int = 80,
                           protocol: ListenerProtocol = ListenerProtocol.HTTP,
                           redirect_http: bool = False,
                           assign_public_ip: bool = True,
                           health_check_grace_period: int = 0,
                           desired_count: int = 1,
                           certificate_arn: Optional[str] = None) -> ServiceHandle:
        """
        Add the load balanced service. The load balancer and its target group
        are derived from it; the target group keeps the default health check
        until configure_health_check() amends it.
        """
        self._ensure_open("add public service")
        self._ensure_service_prerequisites(logical_id)
        if self._public is not None:
            raise ConfigurationError("The graph already contains a public service.")
        if redirect_http and protocol is not ListenerProtocol.HTTPS:
            raise ConfigurationError("HTTP redirect requires an HTTPS listener.")
        if desired_count < 0:
            raise ConfigurationError("Desired count cannot be negative.")

        lb_id = f"{logical_id}LB"
        load_balancer = LoadBalancerDescriptor(
            logical_id=lb_id,
            public=True,
            listener_port=listener_port,
            protocol=protocol,
            redirect_http=redirect_http,
            dns_name=Reference(lb_id, "DNSName"),
            certificate_arn=certificate_arn,
        )
        handle = ServiceHandle(logical_id, f"{logical_id}TargetGroup")
        self._public = {
            "logical_id": logical_id,
            "assign_public_ip": assign_public_ip,
            "health_check_grace_period": health_check_grace_period,
            "desired_count": desired_count,
            "load_balancer": load_balancer,
            "target_port": self._task_template.container.container_port,
            "health_check": HealthCheck(),
        }
        self._public_handle = handle
        self.logger.debug(f"Added public service {logical_id} behind {lb_id}")
        return handle

    def load_balancer_of(self, handle: ServiceHandle) -> LoadBalancerDescriptor:
        self._check_handle(handle)
        return self._public["load_balancer"]

    def _check_handle(self, handle: Optional[ServiceHandle]):
        if self._public_handle is None:
            raise ConfigurationError(
                "Target group refinement requires the public service to exist first.")
        if not isinstance(handle, ServiceHandle) or handle != self._public_handle:
            raise ConfigurationError(f"Unknown service handle {handle!r}.")

    def configure_health_check(self, handle: Optional[ServiceHandle], path: str,
                               healthy_http_codes: str = "200") -> HealthCheck:
        self._ensure_open("refine target group")
        self._check_handle(handle)
        if not isinstance(path, str) or not path.startswith("/"):
            raise ConfigurationError(f"Health check path must be absolute: {path}")
        self._public["health_check"] = HealthCheck(path, healthy_http_codes)
        self.logger.debug(f"Health check of {handle.target_group_id} set to {path} ({healthy_http_codes})")
        return self._public["health_check"]

    def add_private_service(self, logical_id: str,
                            subnet_type: SubnetType = SubnetType.PRIVATE_WITH_EGRESS,
                            desired_count: int = 1) -> PrivateServiceDescriptor:
        self._ensure_open("add private service")
        self._ensure_service_prerequisites(logical_id)
        if self._private is not None:
            raise ConfigurationError("The graph already contains a private service.")
        if subnet_type is SubnetType.PUBLIC:
            raise ConfigurationError("A private service cannot be placed in public subnets.")
        self._private = PrivateServiceDescriptor(
            logical_id=logical_id,
            cluster=self._cluster,
            task_template=self._task_template,
            assign_public_ip=False,
            subnet_type=subnet_type,
            desired_count=desired_count,
        )
        self.logger.debug(f"Added private service {logical_id} in {subnet_type.value} subnets")
        return self._private

    def add_registry(self, logical_id: str, repository_name: str,
                     removal_policy: RemovalPolicy = RemovalPolicy.RETAIN,
                     image_scan_on_push: bool = True) -> RegistryDescriptor:
        self._ensure_open("add registry")
        if self._registry is not None:
            raise ConfigurationError("The graph already contains a registry.")
        if not repository_name:
            raise ConfigurationError("Registry requires a repository name.")
        self._registry = RegistryDescriptor(
            logical_id=logical_id,
            repository_name=repository_name,
            removal_policy=removal_policy,
            image_scan_on_push=image_scan_on_push,
            uri=Reference(logical_id, "RepositoryUri"),
        )
        self.logger.debug(f"Added registry {repository_name}")
        return self._registry

    def add_output(self, name: str, value: Reference, description: str) -> OutputBinding:
        self._ensure_open("add output")
        if any(o.name == name for o in self._outputs):
            raise ConfigurationError(f"Output '{name}' is already declared.")
        if not isinstance(value, Reference):
            raise ConfigurationError(f"Output '{name}' must reference a resource attribute.")
        binding = OutputBinding(name, value, description)
        self._outputs.append(binding)
        return binding

    def seal(self) -> ResourceGraph:
        """
        Freeze the collected descriptors. Fails without exposing anything
        when one of the five resource kinds is missing.
        """
        self._ensure_open("seal")
        missing = [
            kind for kind, value in (
                ("cluster", self._cluster),
                ("task template", self._task_template),
                ("public service", self._public),
                ("private service", self._private),
                ("registry", self._registry),
            ) if value is None
        ]
        if missing:
            raise ConfigurationError(f"Cannot seal graph '{self.identity}': missing {', '.join(missing)}.")

        draft = self._public
        public_service = PublicServiceDescriptor(
            logical_id=draft["logical_id"],
            cluster=self._cluster,
            task_template=self._task_template,
            assign_public_ip=draft["assign_public_ip"],
            subnet_type=SubnetType.PUBLIC,
            health_check_grace_period=draft["health_check_grace_period"],
            desired_count=draft["desired_count"],
            load_balancer=draft["load_balancer"],
            target_group=TargetGroupDescriptor(
                logical_id=self._public_handle.target_group_id,
                port=draft["target_port"],
                health_check=draft["health_check"],
            ),
        )
        graph = ResourceGraph(
            identity=self.identity,
            cluster=self._cluster,
            task_template=self._task_template,
            public_service=public_service,
            private_service=self._private,
            registry=self._registry,
            outputs=tuple(self._outputs),
        )
        self._sealed = True
        self.logger.debug(f"Sealed graph '{self.identity}' with {len(graph.outputs)} outputs")
        return graph
