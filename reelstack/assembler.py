"""
assembler.py: module that assembles the ReelQuotes services stack
"""
import logging
from typing import Optional

from .builder import GraphBuilder
from .models import (
    ContainerSpec,
    ListenerProtocol,
    LogSink,
    NetworkContext,
    RemovalPolicy,
    ResourceGraph,
    SubnetType,
)

logger = logging.getLogger("reelstack.assembler")

CLUSTER_NAME = "ReelQuotesCluster"
REPOSITORY_NAME = "reelquotes-main-api"
HEALTH_CHECK_PATH = "/api/v1/health"
HEALTHY_HTTP_CODES = "200"
LOG_STREAM_PREFIX = "NestJsApp"
LOG_RETENTION_DAYS = 7
PLACEHOLDER_IMAGE = "hello-world"

TASK_CPU = 256
TASK_MEMORY_MIB = 512
CONTAINER_PORT = 80
LISTENER_PORT = 443
GRACE_PERIOD_SECONDS = 60


def assemble(identity: str, network: Optional[NetworkContext],
             image: str = PLACEHOLDER_IMAGE,
             certificate_arn: Optional[str] = None) -> ResourceGraph:
    """
    assemble: builds the resource graph for one stack identity

    Raises ConfigurationError when the network context is missing or the
    identity is empty; no graph is returned in that case.
    """
    builder = GraphBuilder(identity)

    builder.add_cluster("ReelQuotesCluster", CLUSTER_NAME, network)

    container = ContainerSpec(
        name="NestJsContainer",
        image=image,
        container_port=CONTAINER_PORT,
        log_sink=LogSink(LOG_STREAM_PREFIX, LOG_RETENTION_DAYS),
    )
    builder.add_task_template("NestJsTaskDef", TASK_CPU, TASK_MEMORY_MIB, container)

    main_api = builder.add_public_service(
        "MainApiService",
        listener_port=LISTENER_PORT,
        protocol=ListenerProtocol.HTTPS,
        redirect_http=True,
        assign_public_ip=True,
        health_check_grace_period=GRACE_PERIOD_SECONDS,
        desired_count=1,
        certificate_arn=certificate_arn,
    )
    builder.configure_health_check(main_api, HEALTH_CHECK_PATH, HEALTHY_HTTP_CODES)

    builder.add_output(
        "MainApiALBDns",
        builder.load_balancer_of(main_api).dns_name,
        "Public DNS name of the Application Load Balancer for the main API",
    )

    # Internal service, reachable only from inside the network
    builder.add_private_service(
        "SubtitleApiService",
        subnet_type=SubnetType.PRIVATE_WITH_EGRESS,
        desired_count=1,
    )

    registry = builder.add_registry(
        "MainApiRepository",
        REPOSITORY_NAME,
        removal_policy=RemovalPolicy.RETAIN,
        image_scan_on_push=True,
    )
    builder.add_output(
        "MainApiEcrRepoUri",
        registry.uri,
        f"ECR repository URI for {REPOSITORY_NAME}",
    )

    graph = builder.seal()
    logger.info(f"Assembled stack '{identity}' in {network.vpc_id}")
    return graph
