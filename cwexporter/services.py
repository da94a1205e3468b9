"""Namespaces supported by discovery jobs and how to read dimensions from ARNs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DimensionsRegexp:
    """A compiled ARN pattern with the dimension names its groups capture."""

    regexp: re.Pattern[str]
    dimensions_names: tuple[str, ...]


@dataclass(frozen=True)
class ServiceConfig:
    """A namespace that discovery jobs can scrape.

    ``resource_filters`` are the resource type filters sent to the tagging API.
    ``dimension_regexps`` extract dimension values from resource ARNs with named
    groups; an underscore in a group name stands for a space in the dimension name.
    """

    namespace: str
    alias: str
    resource_filters: tuple[str, ...] | None = None
    dimension_regexps: tuple[re.Pattern[str], ...] | None = field(default=None)

    def to_model_dimensions_regexp(self) -> list[DimensionsRegexp]:
        """Pair every dimension regexp with the dimension names of its groups."""
        result = []
        for pattern in self.dimension_regexps or ():
            names_by_index = {index: name for name, index in pattern.groupindex.items()}
            names = tuple(
                names_by_index.get(index, "").replace("_", " ")
                for index in range(1, pattern.groups + 1)
            )
            result.append(DimensionsRegexp(regexp=pattern, dimensions_names=names))
        return result


def _svc(
    namespace: str,
    alias: str,
    filters: tuple[str, ...] | None = None,
    regexps: tuple[str, ...] | None = None,
) -> ServiceConfig:
    return ServiceConfig(
        namespace=namespace,
        alias=alias,
        resource_filters=filters,
        dimension_regexps=tuple(re.compile(r) for r in regexps) if regexps is not None else None,
    )


SUPPORTED_SERVICES: tuple[ServiceConfig, ...] = (
    _svc("CWAgent", "cwagent"),
    _svc("AWS/Usage", "usage"),
    _svc("AWS/CertificateManager", "acm", ("acm:certificate",)),
    _svc(
        "AWS/ACMPrivateCA",
        "acm-pca",
        ("acm-pca:certificate-authority",),
        ("(?P<PrivateCAArn>.*)",),
    ),
    _svc("AmazonMWAA", "airflow", ("airflow",)),
    _svc("AWS/MWAA", "mwaa"),
    _svc(
        "AWS/ApplicationELB",
        "alb",
        ("elasticloadbalancing:loadbalancer/app", "elasticloadbalancing:targetgroup"),
        (":(?P<TargetGroup>targetgroup/.+)", ":loadbalancer/(?P<LoadBalancer>.+)$"),
    ),
    _svc("AWS/AppStream", "appstream", ("appstream",), (":fleet/(?P<FleetName>[^/]+)",)),
    _svc("AWS/Backup", "backup", ("backup",)),
    _svc(
        "AWS/ApiGateway",
        "apigateway",
        ("apigateway",),
        (
            # REST API gateways
            "/restapis/(?P<ApiName>[^/]+)$",
            "/restapis/(?P<ApiName>[^/]+)/stages/(?P<Stage>[^/]+)$",
            # HTTP and websocket gateways
            "/apis/(?P<ApiId>[^/]+)$",
            "/apis/(?P<ApiId>[^/]+)/stages/(?P<Stage>[^/]+)$",
            "/apis/(?P<ApiId>[^/]+)/routes/(?P<Route>[^/]+)$",
        ),
    ),
    _svc("AWS/AmazonMQ", "mq", ("mq",), ("broker:(?P<Broker>[^:]+)",)),
    _svc("AWS/AppSync", "appsync", ("appsync",), ("apis/(?P<GraphQLAPIId>[^/]+)",)),
    _svc("AWS/Athena", "athena", ("athena",), ("workgroup/(?P<WorkGroup>[^/]+)",)),
    _svc(
        "AWS/AutoScaling",
        "asg",
        None,
        ("autoScalingGroupName/(?P<AutoScalingGroupName>[^/]+)",),
    ),
    _svc("AWS/ElasticBeanstalk", "beanstalk", ("elasticbeanstalk:environment",)),
    _svc("AWS/Billing", "billing"),
    _svc("AWS/Cassandra", "cassandra", ("cassandra",)),
    _svc(
        "AWS/CloudFront",
        "cloudfront",
        ("cloudfront:distribution",),
        ("distribution/(?P<DistributionId>[^/]+)",),
    ),
    _svc(
        "AWS/Cognito",
        "cognito-idp",
        ("cognito-idp:userpool",),
        ("userpool/(?P<UserPool>[^/]+)",),
    ),
    _svc(
        "AWS/DataSync",
        "datasync",
        ("datasync:task", "datasync:agent"),
        (":task/(?P<TaskId>[^/]+)", ":agent/(?P<AgentId>[^/]+)"),
    ),
    _svc(
        "AWS/DMS",
        "dms",
        ("dms",),
        (
            "rep:[^/]+/(?P<ReplicationInstanceIdentifier>[^/]+)",
            "task:(?P<ReplicationTaskIdentifier>[^/]+)/(?P<ReplicationInstanceIdentifier>[^/]+)",
        ),
    ),
    _svc("AWS/DDoSProtection", "shield", ("shield:protection",), ("(?P<ResourceArn>.+)",)),
    _svc(
        "AWS/DocDB",
        "docdb",
        ("rds:db", "rds:cluster"),
        ("cluster:(?P<DBClusterIdentifier>[^/]+)", "db:(?P<DBInstanceIdentifier>[^/]+)"),
    ),
    _svc(
        "AWS/DX",
        "dx",
        ("directconnect",),
        (
            ":dxcon/(?P<ConnectionId>[^/]+)",
            ":dxlag/(?P<LagId>[^/]+)",
            ":dxvif/(?P<VirtualInterfaceId>[^/]+)",
        ),
    ),
    _svc("AWS/DynamoDB", "dynamodb", ("dynamodb:table",), (":table/(?P<TableName>[^/]+)",)),
    _svc("AWS/EBS", "ebs", ("ec2:volume",), ("volume/(?P<VolumeId>[^/]+)",)),
    _svc(
        "AWS/ElastiCache",
        "ec",
        ("elasticache:cluster",),
        ("cluster:(?P<CacheClusterId>[^/]+)",),
    ),
    _svc("AWS/MemoryDB", "memorydb", ("memorydb:cluster",), ("cluster/(?P<ClusterName>[^/]+)",)),
    _svc("AWS/EC2", "ec2", ("ec2:instance",), ("instance/(?P<InstanceId>[^/]+)",)),
    _svc("AWS/EC2Spot", "ec2Spot", None, ("(?P<FleetRequestId>.*)",)),
    _svc(
        "AWS/ECS",
        "ecs-svc",
        ("ecs:cluster", "ecs:service"),
        (
            ":cluster/(?P<ClusterName>[^/]+)$",
            ":service/(?P<ClusterName>[^/]+)/(?P<ServiceName>[^/]+)$",
        ),
    ),
    _svc(
        "ECS/ContainerInsights",
        "ecs-containerinsights",
        ("ecs:cluster", "ecs:service"),
        (
            # long-format ARNs
            ":cluster/(?P<ClusterName>[^/]+)$",
            ":service/(?P<ClusterName>[^/]+)/(?P<ServiceName>[^/]+)$",
        ),
    ),
    _svc(
        "AWS/EFS",
        "efs",
        ("elasticfilesystem:file-system",),
        ("file-system/(?P<FileSystemId>[^/]+)",),
    ),
    _svc(
        "AWS/ELB",
        "elb",
        ("elasticloadbalancing:loadbalancer",),
        (":loadbalancer/(?P<LoadBalancerName>.+)$",),
    ),
    _svc(
        "AWS/ElasticMapReduce",
        "emr",
        ("elasticmapreduce:cluster",),
        ("cluster/(?P<JobFlowId>[^/]+)",),
    ),
    _svc(
        "AWS/EMRServerless",
        "emr-serverless",
        ("emr-serverless:applications",),
        ("applications/(?P<ApplicationId>[^/]+)",),
    ),
    _svc("AWS/ES", "es", ("es:domain",), (":domain/(?P<DomainName>[^/]+)",)),
    _svc(
        "AWS/Firehose",
        "firehose",
        ("firehose",),
        (":deliverystream/(?P<DeliveryStreamName>[^/]+)",),
    ),
    _svc("AWS/FSx", "fsx", ("fsx:file-system",), ("file-system/(?P<FileSystemId>[^/]+)",)),
    _svc("AWS/GameLift", "gamelift", ("gamelift",), (":fleet/(?P<FleetId>[^/]+)",)),
    _svc(
        "AWS/GlobalAccelerator",
        "ga",
        ("globalaccelerator",),
        (
            "accelerator/(?P<Accelerator>[^/]+)$",
            "accelerator/(?P<Accelerator>[^/]+)/listener/(?P<Listener>[^/]+)$",
            "accelerator/(?P<Accelerator>[^/]+)/listener/(?P<Listener>[^/]+)"
            "/endpoint-group/(?P<EndpointGroup>[^/]+)$",
        ),
    ),
    _svc("Glue", "glue", ("glue:job",), (":job/(?P<JobName>[^/]+)",)),
    _svc(
        "AWS/IoT",
        "iot",
        ("iot:rule", "iot:provisioningtemplate"),
        (":rule/(?P<RuleName>[^/]+)", ":provisioningtemplate/(?P<TemplateName>[^/]+)"),
    ),
    _svc("AWS/Kafka", "kafka", ("kafka:cluster",), (":cluster/(?P<Cluster_Name>[^/]+)",)),
    _svc(
        "AWS/KafkaConnect",
        "kafkaconnect",
        ("kafka:cluster",),
        (":connector/(?P<Connector_Name>[^/]+)",),
    ),
    _svc("AWS/Kinesis", "kinesis", ("kinesis:stream",), (":stream/(?P<StreamName>[^/]+)",)),
    _svc(
        "AWS/KinesisAnalytics",
        "kinesis-analytics",
        ("kinesisanalytics:application",),
        (":application/(?P<Application>[^/]+)",),
    ),
    _svc(
        "AWS/Lambda",
        "lambda",
        ("lambda:function",),
        (":function:(?P<FunctionName>[^/]+)",),
    ),
    _svc(
        "AWS/MediaConnect",
        "mediaconnect",
        ("mediaconnect:flow", "mediaconnect:source", "mediaconnect:output"),
        (
            "^(?P<FlowARN>.*:flow:.*)$",
            "^(?P<SourceARN>.*:source:.*)$",
            "^(?P<OutputARN>.*:output:.*)$",
        ),
    ),
    _svc(
        "AWS/MediaConvert",
        "mediaconvert",
        ("mediaconvert",),
        ("(?P<Queue>.*:.*:mediaconvert:.*:queues/.*)$",),
    ),
    _svc(
        "AWS/MediaLive",
        "medialive",
        ("medialive:channel",),
        (":channel:(?P<ChannelId>.+)$",),
    ),
    _svc(
        "AWS/MediaTailor",
        "mediatailor",
        ("mediatailor:playbackConfiguration",),
        ("playbackConfiguration/(?P<ConfigurationName>[^/]+)",),
    ),
    _svc(
        "AWS/Neptune",
        "neptune",
        ("rds:db", "rds:cluster"),
        (":cluster:(?P<DBClusterIdentifier>[^/]+)", ":db:(?P<DBInstanceIdentifier>[^/]+)"),
    ),
    _svc(
        "AWS/NetworkFirewall",
        "nfw",
        ("network-firewall:firewall",),
        ("firewall/(?P<FirewallName>[^/]+)",),
    ),
    _svc(
        "AWS/NATGateway",
        "ngw",
        ("ec2:natgateway",),
        ("natgateway/(?P<NatGatewayId>[^/]+)",),
    ),
    _svc(
        "AWS/NetworkELB",
        "nlb",
        ("elasticloadbalancing:loadbalancer/net", "elasticloadbalancing:targetgroup"),
        (":(?P<TargetGroup>targetgroup/.+)", ":loadbalancer/(?P<LoadBalancer>.+)$"),
    ),
    _svc(
        "AWS/PrivateLinkEndpoints",
        "vpc-endpoint",
        ("ec2:vpc-endpoint",),
        (":vpc-endpoint/(?P<VPC_Endpoint_Id>.+)",),
    ),
    _svc(
        "AWS/PrivateLinkServices",
        "vpc-endpoint-service",
        ("ec2:vpc-endpoint-service",),
        (":vpc-endpoint-service/(?P<Service_Id>.+)",),
    ),
    _svc("AWS/Prometheus", "amp"),
    _svc("AWS/QLDB", "qldb", ("qldb",), (":ledger/(?P<LedgerName>[^/]+)",)),
    _svc(
        "AWS/RDS",
        "rds",
        ("rds:db", "rds:cluster"),
        (":cluster:(?P<DBClusterIdentifier>[^/]+)", ":db:(?P<DBInstanceIdentifier>[^/]+)"),
    ),
    _svc(
        "AWS/Redshift",
        "redshift",
        ("redshift:cluster",),
        (":cluster:(?P<ClusterIdentifier>[^/]+)",),
    ),
    _svc(
        "AWS/Route53Resolver",
        "route53-resolver",
        ("route53resolver",),
        (":resolver-endpoint/(?P<EndpointId>[^/]+)",),
    ),
    _svc("AWS/Route53", "route53", ("route53",), (":healthcheck/(?P<HealthCheckId>[^/]+)",)),
    _svc("AWS/S3", "s3", ("s3",), ("(?P<BucketName>[^:]+)$",)),
    _svc("AWS/SES", "ses"),
    _svc("AWS/States", "sfn", ("states",), ("(?P<StateMachineArn>.*)",)),
    _svc("AWS/SNS", "sns", ("sns",), ("(?P<TopicName>[^:]+)$",)),
    _svc("AWS/SQS", "sqs", ("sqs",), ("(?P<QueueName>[^:]+)$",)),
    _svc(
        "AWS/StorageGateway",
        "storagegateway",
        ("storagegateway",),
        (
            ":gateway/(?P<GatewayId>[^:]+)$",
            ":share/(?P<ShareId>[^:]+)$",
            "^(?P<GatewayId>[^:/]+)/(?P<GatewayName>[^:]+)$",
        ),
    ),
    _svc(
        "AWS/TransitGateway",
        "tgw",
        ("ec2:transit-gateway",),
        (
            ":transit-gateway/(?P<TransitGateway>[^/]+)",
            "(?P<TransitGateway>[^/]+)/(?P<TransitGatewayAttachment>[^/]+)",
        ),
    ),
    _svc("AWS/TrustedAdvisor", "trustedadvisor"),
    _svc("AWS/VPN", "vpn", ("ec2:vpn-connection",), (":vpn-connection/(?P<VpnId>[^/]+)",)),
    _svc(
        "AWS/ClientVPN",
        "clientvpn",
        ("ec2:client-vpn-endpoint",),
        (":client-vpn-endpoint/(?P<Endpoint>[^/]+)",),
    ),
    _svc("AWS/WAFV2", "wafv2", ("wafv2",), ("/webacl/(?P<WebACL>[^/]+)",)),
    _svc(
        "AWS/WorkSpaces",
        "workspaces",
        ("workspaces:workspace", "workspaces:directory"),
        (":workspace/(?P<WorkspaceId>[^/]+)$", ":directory/(?P<DirectoryId>[^/]+)$"),
    ),
    _svc("AWS/AOSS", "aoss", ("aoss:collection",), (":collection/(?P<CollectionId>[^/]+)",)),
    _svc(
        "AWS/SageMaker",
        "sagemaker",
        ("sagemaker:endpoint",),
        (":endpoint/(?P<EndpointName>[^/]+)$",),
    ),
    _svc(
        "/aws/sagemaker/Endpoints",
        "sagemaker-endpoints",
        ("sagemaker:endpoint",),
        (":endpoint/(?P<EndpointName>[^/]+)$",),
    ),
    _svc("/aws/sagemaker/TrainingJobs", "sagemaker-training", ("sagemaker:training-job",)),
    _svc("/aws/sagemaker/ProcessingJobs", "sagemaker-processing", ("sagemaker:processing-job",)),
    _svc("/aws/sagemaker/TransformJobs", "sagemaker-transform", ("sagemaker:transform-job",)),
    _svc(
        "/aws/sagemaker/InferenceRecommendationsJobs",
        "sagemaker-inf-rec",
        ("sagemaker:inference-recommendations-job",),
        (":inference-recommendations-job/(?P<JobName>[^/]+)",),
    ),
    _svc(
        "AWS/Sagemaker/ModelBuildingPipeline",
        "sagemaker-model-building-pipeline",
        ("sagemaker:pipeline",),
        (":pipeline/(?P<PipelineName>[^/]+)",),
    ),
    _svc("AWS/IPAM", "ipam", ("ec2:ipam-pool",), (":ipam-pool/(?P<IpamPoolId>[^/]+)$",)),
    _svc("AWS/Bedrock", "bedrock"),
    _svc(
        "AWS/Events",
        "event-rule",
        ("events",),
        (":rule/(?P<EventBusName>[^/]+)/(?P<RuleName>[^/]+)$",),
    ),
)


def get_service(service_type: str) -> ServiceConfig | None:
    """Return the first supported service whose alias or namespace matches, else None."""
    return next(
        (
            svc
            for svc in SUPPORTED_SERVICES
            if svc.alias == service_type or svc.namespace == service_type
        ),
        None,
    )