"""
manifest.py: renders a resource graph as a tool-neutral descriptor manifest
"""
from typing import Dict, Any

from ..models import ResourceGraph
from .base import TemplateRenderer


class ManifestRenderer(TemplateRenderer):
    """
    ManifestRenderer: dumps the descriptors as they were assembled, with
    shared descriptors written once and referenced by logical id
    """

    name = "manifest"

    def render(self, graph: ResourceGraph) -> Dict[str, Any]:
        cluster = graph.cluster
        task = graph.task_template
        public = graph.public_service
        private = graph.private_service
        registry = graph.registry
        lb = public.load_balancer

        return {
            "identity": graph.identity,
            "network": {"name": cluster.network.name, "vpc_id": cluster.network.vpc_id},
            "cluster": {"logical_id": cluster.logical_id, "name": cluster.cluster_name},
            "task_template": {
                "logical_id": task.logical_id,
                "cpu": task.cpu,
                "memory_mib": task.memory_mib,
                "container": {
                    "name": task.container.name,
                    "image": task.container.image,
                    "port": task.container.container_port,
                    "logging": {
                        "stream_prefix": task.container.log_sink.stream_prefix,
                        "retention_days": task.container.log_sink.retention_days,
                    },
                },
            },
            "public_service": {
                "logical_id": public.logical_id,
                "cluster": public.cluster.logical_id,
                "task_template": public.task_template.logical_id,
                "assign_public_ip": public.assign_public_ip,
                "subnet_type": public.subnet_type.value,
                "health_check_grace_period": public.health_check_grace_period,
                "desired_count": public.desired_count,
                "load_balancer": {
                    "logical_id": lb.logical_id,
                    "public": lb.public,
                    "listener_port": lb.listener_port,
                    "protocol": lb.protocol.value,
                    "redirect_http": lb.redirect_http,
                    "certificate_arn": lb.certificate_arn,
                    "dns_name": str(lb.dns_name),
                },
                "target_group": {
                    "logical_id": public.target_group.logical_id,
                    "port": public.target_group.port,
                    "health_check": {
                        "path": public.target_group.health_check.path,
                        "healthy_http_codes": public.target_group.health_check.healthy_http_codes,
                    },
                },
            },
            "private_service": {
                "logical_id": private.logical_id,
                "cluster": private.cluster.logical_id,
                "task_template": private.task_template.logical_id,
                "assign_public_ip": private.assign_public_ip,
                "subnet_type": private.subnet_type.value,
                "desired_count": private.desired_count,
            },
            "registry": {
                "logical_id": registry.logical_id,
                "repository_name": registry.repository_name,
                "removal_policy": registry.removal_policy.value,
                "image_scan_on_push": registry.image_scan_on_push,
                "uri": str(registry.uri),
            },
            "outputs": [
                {"name": o.name, "value": str(o.value), "description": o.description}
                for o in graph.outputs
            ],
        }
