"""
cloudformation.py: renders a resource graph as a CloudFormation template
"""
from typing import Dict, Any, List

from ..models import (
    ListenerProtocol,
    PrivateServiceDescriptor,
    PublicServiceDescriptor,
    Reference,
    RemovalPolicy,
    ResourceGraph,
    SubnetType,
)
from .base import TemplateRenderer

SUBNET_PARAMETERS = {
    SubnetType.PUBLIC: "PublicSubnetIds",
    SubnetType.PRIVATE_WITH_EGRESS: "PrivateSubnetIds",
    SubnetType.PRIVATE_ISOLATED: "IsolatedSubnetIds",
}

EXECUTION_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"


def ref(logical_id: str) -> Dict[str, str]:
    return {"Ref": logical_id}


def get_att(reference: Reference) -> Dict[str, List[str]]:
    return {"Fn::GetAtt": [reference.logical_id, reference.attribute]}


class CloudFormationRenderer(TemplateRenderer):
    """
    CloudFormationRenderer: emits the graph as an AWS CloudFormation template.
    Subnets are left to template parameters since the network context only
    carries the VPC.
    """

    name = "cloudformation"

    def render(self, graph: ResourceGraph) -> Dict[str, Any]:
        resources: Dict[str, Any] = {}
        resources.update(self._cluster(graph))
        resources.update(self._task_definition(graph))
        resources.update(self._load_balancer(graph))
        resources.update(self._public_service(graph.public_service))
        resources.update(self._private_service(graph.private_service))
        resources.update(self._registry(graph))

        return {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Description": f"{graph.identity}: ReelQuotes container services",
            "Parameters": self._parameters(graph),
            "Resources": resources,
            "Outputs": {
                binding.name: {
                    "Description": binding.description,
                    "Value": get_att(binding.value),
                }
                for binding in graph.outputs
            },
        }

    def _parameters(self, graph: ResourceGraph) -> Dict[str, Any]:
        parameters = {}
        for service in (graph.public_service, graph.private_service):
            name = SUBNET_PARAMETERS[service.subnet_type]
            parameters[name] = {
                "Type": "List<AWS::EC2::Subnet::Id>",
                "Description": f"{service.subnet_type.value} subnets of {graph.cluster.network.vpc_id}",
            }
        return parameters

    def _cluster(self, graph):
        return {
            graph.cluster.logical_id: {
                "Type": "AWS::ECS::Cluster",
                "Properties": {"ClusterName": graph.cluster.cluster_name},
            }
        }

    def _task_definition(self, graph):
        task = graph.task_template
        container = task.container
        log_group_id = f"{task.logical_id}LogGroup"
        role_id = f"{task.logical_id}ExecutionRole"
        return {
            log_group_id: {
                "Type": "AWS::Logs::LogGroup",
                "Properties": {"RetentionInDays": container.log_sink.retention_days},
                "DeletionPolicy": "Retain",
                "UpdateReplacePolicy": "Retain",
            },
            role_id: {
                "Type": "AWS::IAM::Role",
                "Properties": {
                    "AssumeRolePolicyDocument": {
                        "Version": "2012-10-17",
                        "Statement": [{
                            "Effect": "Allow",
                            "Principal": {"Service": "ecs-tasks.amazonaws.com"},
                            "Action": "sts:AssumeRole",
                        }],
                    },
                    "ManagedPolicyArns": [EXECUTION_POLICY_ARN],
                },
            },
            task.logical_id: {
                "Type": "AWS::ECS::TaskDefinition",
                "Properties": {
                    "Family": f"{graph.identity}{task.logical_id}",
                    "Cpu": str(task.cpu),
                    "Memory": str(task.memory_mib),
                    "NetworkMode": "awsvpc",
                    "RequiresCompatibilities": ["FARGATE"],
                    "ExecutionRoleArn": get_att(Reference(role_id, "Arn")),
                    "ContainerDefinitions": [{
                        "Name": container.name,
                        "Image": container.image,
                        "Essential": True,
                        "PortMappings": [{"ContainerPort": container.container_port, "Protocol": "tcp"}],
                        "LogConfiguration": {
                            "LogDriver": "awslogs",
                            "Options": {
                                "awslogs-group": ref(log_group_id),
                                "awslogs-stream-prefix": container.log_sink.stream_prefix,
                                "awslogs-region": ref("AWS::Region"),
                            },
                        },
                    }],
                },
            },
        }

    def _load_balancer(self, graph):
        service = graph.public_service
        lb = service.load_balancer
        tg = service.target_group
        sg_id = f"{lb.logical_id}SecurityGroup"
        vpc_id = graph.cluster.network.vpc_id

        ingress_ports = [lb.listener_port] + ([80] if lb.redirect_http else [])
        listener = {
            "LoadBalancerArn": ref(lb.logical_id),
            "Port": lb.listener_port,
            "Protocol": lb.protocol.value,
            "DefaultActions": [{"Type": "forward", "TargetGroupArn": ref(tg.logical_id)}],
        }
        if lb.certificate_arn:
            listener["Certificates"] = [{"CertificateArn": lb.certificate_arn}]

        resources = {
            sg_id: {
                "Type": "AWS::EC2::SecurityGroup",
                "Properties": {
                    "GroupDescription": f"Load balancer for {service.logical_id}",
                    "VpcId": vpc_id,
                    "SecurityGroupIngress": [
                        {"IpProtocol": "tcp", "FromPort": port, "ToPort": port, "CidrIp": "0.0.0.0/0"}
                        for port in ingress_ports
                    ],
                },
            },
            lb.logical_id: {
                "Type": "AWS::ElasticLoadBalancingV2::LoadBalancer",
                "Properties": {
                    "Type": "application",
                    "Scheme": "internet-facing" if lb.public else "internal",
                    "Subnets": ref(SUBNET_PARAMETERS[service.subnet_type]),
                    "SecurityGroups": [get_att(Reference(sg_id, "GroupId"))],
                },
            },
            f"{lb.logical_id}Listener": {
                "Type": "AWS::ElasticLoadBalancingV2::Listener",
                "Properties": listener,
            },
            tg.logical_id: {
                "Type": "AWS::ElasticLoadBalancingV2::TargetGroup",
                "Properties": {
                    "Port": tg.port,
                    "Protocol": "HTTP",
                    "TargetType": "ip",
                    "VpcId": vpc_id,
                    "HealthCheckPath": tg.health_check.path,
                    "Matcher": {"HttpCode": tg.health_check.healthy_http_codes},
                },
            },
        }
        if lb.redirect_http:
            resources[f"{lb.logical_id}RedirectListener"] = {
                "Type": "AWS::ElasticLoadBalancingV2::Listener",
                "Properties": {
                    "LoadBalancerArn": ref(lb.logical_id),
                    "Port": 80,
                    "Protocol": ListenerProtocol.HTTP.value,
                    "DefaultActions": [{
                        "Type": "redirect",
                        "RedirectConfig": {
                            "Protocol": ListenerProtocol.HTTPS.value,
                            "Port": str(lb.listener_port),
                            "StatusCode": "HTTP_301",
                        },
                    }],
                },
            }
        return resources

    def _service_security_group(self, service, ingress):
        return {
            "Type": "AWS::EC2::SecurityGroup",
            "Properties": {
                "GroupDescription": f"Tasks of {service.logical_id}",
                "VpcId": service.cluster.network.vpc_id,
                "SecurityGroupIngress": ingress,
            },
        }

    def _fargate_service(self, service, sg_id: str) -> Dict[str, Any]:
        return {
            "Cluster": ref(service.cluster.logical_id),
            "TaskDefinition": ref(service.task_template.logical_id),
            "LaunchType": "FARGATE",
            "DesiredCount": service.desired_count,
            "NetworkConfiguration": {
                "AwsvpcConfiguration": {
                    "AssignPublicIp": "ENABLED" if service.assign_public_ip else "DISABLED",
                    "Subnets": ref(SUBNET_PARAMETERS[service.subnet_type]),
                    "SecurityGroups": [get_att(Reference(sg_id, "GroupId"))],
                }
            },
        }

    def _public_service(self, service: PublicServiceDescriptor):
        lb = service.load_balancer
        container = service.task_template.container
        sg_id = f"{service.logical_id}SecurityGroup"
        properties = self._fargate_service(service, sg_id)
        properties["HealthCheckGracePeriodSeconds"] = service.health_check_grace_period
        properties["LoadBalancers"] = [{
            "ContainerName": container.name,
            "ContainerPort": container.container_port,
            "TargetGroupArn": ref(service.target_group.logical_id),
        }]
        depends_on = [f"{lb.logical_id}Listener"]
        if lb.redirect_http:
            depends_on.append(f"{lb.logical_id}RedirectListener")
        return {
            sg_id: self._service_security_group(service, [{
                "IpProtocol": "tcp",
                "FromPort": container.container_port,
                "ToPort": container.container_port,
                "SourceSecurityGroupId": get_att(Reference(f"{lb.logical_id}SecurityGroup", "GroupId")),
            }]),
            service.logical_id: {
                "Type": "AWS::ECS::Service",
                "DependsOn": depends_on,
                "Properties": properties,
            },
        }

    def _private_service(self, service: PrivateServiceDescriptor):
        sg_id = f"{service.logical_id}SecurityGroup"
        return {
            sg_id: self._service_security_group(service, []),
            service.logical_id: {
                "Type": "AWS::ECS::Service",
                "Properties": self._fargate_service(service, sg_id),
            },
        }

    def _registry(self, graph):
        registry = graph.registry
        resource = {
            "Type": "AWS::ECR::Repository",
            "Properties": {
                "RepositoryName": registry.repository_name,
                "ImageScanningConfiguration": {"ScanOnPush": registry.image_scan_on_push},
            },
        }
        if registry.removal_policy is RemovalPolicy.RETAIN:
            resource["DeletionPolicy"] = "Retain"
            resource["UpdateReplacePolicy"] = "Retain"
        else:
            resource["DeletionPolicy"] = "Delete"
        return {registry.logical_id: resource}
