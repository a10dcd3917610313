"""
AWS static website: S3 bucket + CloudFront + ACM certificate + Route 53.

This component walks the resource plan built from a ``ResolvedSite`` and
creates one ``pulumi_aws`` resource per node, in dependency order. The bucket
is private: Block Public Access is always on, and CloudFront reads through an
Origin Access Identity (OAI) whose canonical user is the only principal the
bucket policy grants ``s3:GetObject`` to. The distribution redirects all
viewer traffic to HTTPS, serves the DNS-validated ACM certificate, and
rewrites origin 403/404 responses to ``/index.html`` for client-side routing.
Outputs (``site_url``, ``bucket_name``, ``distribution_domain_name``) are
registered on the component so ``__main__`` can export them.

Everything is created through one provider pinned to us-east-1: ACM
certificates used by CloudFront must live there.
"""

from typing import Any, Callable

import pulumi
import pulumi_aws as aws

from website import plan
from website._helpers import bucket_read_policy
from website.errors import ProvisioningError
from website.plan import ResourceKind, ResourceNode
from website.resolver import ResolvedSite

ID: str = "website:aws:StaticWebsite"

CERTIFICATE_REGION: str = "us-east-1"

S3_ORIGIN_ID: str = "s3-origin"

VALIDATION_RECORD_TTL: int = 60

# Always applied to the site bucket. Used by tests and callers to assert on
# secure defaults.
S3_BLOCK_PUBLIC_ACCESS: dict[str, bool] = {
    "block_public_acls": True,
    "block_public_policy": True,
    "ignore_public_acls": True,
    "restrict_public_buckets": True,
}


def pinned_provider(
    name: str,
    account_id: str | None = None,
) -> aws.Provider:
    """
    AWS provider pinned to us-east-1, independent of the default region.

    When ``account_id`` is given the provider refuses to operate on any other
    account, so a stack can't be deployed with the wrong credentials.
    """
    return aws.Provider(
        resource_name=name,
        region=CERTIFICATE_REGION,
        allowed_account_ids=[account_id] if account_id else None,
    )


class StaticWebsite(pulumi.ComponentResource):
    """
    Private S3 bucket served by CloudFront under the site's custom domains.

    Resources: Route 53 zone lookup, OriginAccessIdentity, Bucket,
    BucketPublicAccessBlock, BucketPolicy, Certificate, validation Records,
    CertificateValidation, Distribution, alias Records.
    """

    def __init__(
        self,
        name: str,
        site: ResolvedSite,
        provider: aws.Provider | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create every resource of the site plan.

        Args:
            name: Pulumi resource name; prefix for every child resource.
            site: Resolved domains, SANs and records of the site.
            provider: AWS provider for all children and the zone lookup;
                normally ``pinned_provider(...)``.
            opts: Options for the component itself.

        Outputs (set on self, registered for the component):
            site_url: ``https://`` + site domain.
            bucket_name: Name of the content bucket (equals the site domain).
            distribution_domain_name: CloudFront domain (``*.cloudfront.net``).
        """
        super().__init__(ID, name, None, opts)

        self._name = name
        self._provider = provider
        # Built resources (or lookups) by plan key; builders read their
        # dependencies from here.
        self.resources: dict[str, Any] = {}

        builders: dict[ResourceKind, Callable[[ResourceNode], Any]] = {
            ResourceKind.ZONE_LOOKUP: self._zone_lookup,
            ResourceKind.ORIGIN_ACCESS_IDENTITY: self._origin_access_identity,
            ResourceKind.BUCKET: self._bucket,
            ResourceKind.PUBLIC_ACCESS_BLOCK: self._public_access_block,
            ResourceKind.BUCKET_POLICY: self._bucket_policy,
            ResourceKind.CERTIFICATE: self._certificate,
            ResourceKind.CERTIFICATE_VALIDATION_RECORD: self._validation_record,
            ResourceKind.CERTIFICATE_VALIDATION: self._certificate_validation,
            ResourceKind.DISTRIBUTION: self._distribution,
            ResourceKind.ALIAS_RECORD: self._alias_record,
        }

        for node in plan.provisioning_order(plan.build_plan(site)):
            builder = builders.get(node.kind)
            if builder is None:
                raise ProvisioningError(
                    f"No builder for resource '{node.key}' of kind {node.kind.value}"
                )
            pulumi.log.info(f"{name}: declaring {node.kind.value} '{node.key}'", self)
            self.resources[node.key] = builder(node)

        bucket = self.resources[plan.BUCKET]
        distribution = self.resources[plan.DISTRIBUTION]

        self.site_url: pulumi.Output[str] = pulumi.Output.from_input(site.site_url)
        self.bucket_name: pulumi.Output[str] = bucket.bucket
        self.distribution_domain_name: pulumi.Output[str] = distribution.domain_name
        self.register_outputs(
            {
                "site_url": self.site_url,
                "bucket_name": self.bucket_name,
                "distribution_domain_name": self.distribution_domain_name,
            }
        )

    def _child_name(self, node: ResourceNode) -> str:
        return f"{self._name}-{node.key}"

    def _child_opts(self, **kwargs) -> pulumi.ResourceOptions:
        # Child resources get parent=self so Pulumi builds a proper hierarchy
        # and every child uses the pinned provider.
        return pulumi.ResourceOptions(parent=self, provider=self._provider, **kwargs)

    def _zone_lookup(self, node: ResourceNode):
        # Read-only: the hosted zone for the apex domain must already exist.
        return aws.route53.get_zone_output(
            name=node.props["name"],
            private_zone=False,
            opts=pulumi.InvokeOptions(parent=self, provider=self._provider),
        )

    def _origin_access_identity(self, node: ResourceNode):
        return aws.cloudfront.OriginAccessIdentity(
            resource_name=self._child_name(node),
            comment=node.props["comment"],
            opts=self._child_opts(),
        )

    def _bucket(self, node: ResourceNode):
        # Content outlives the stack: destroying the stack only removes the
        # bucket from state.
        return aws.s3.Bucket(
            resource_name=self._child_name(node),
            bucket=node.props["bucket"],
            opts=self._child_opts(retain_on_delete=True),
        )

    def _public_access_block(self, node: ResourceNode):
        return aws.s3.BucketPublicAccessBlock(
            resource_name=self._child_name(node),
            bucket=self.resources[plan.BUCKET].id,
            opts=self._child_opts(),
            **S3_BLOCK_PUBLIC_ACCESS,
        )

    def _bucket_policy(self, node: ResourceNode):
        bucket = self.resources[plan.BUCKET]
        oai = self.resources[plan.ORIGIN_ACCESS_IDENTITY]
        policy = pulumi.Output.all(bucket.arn, oai.s3_canonical_user_id).apply(
            lambda args: bucket_read_policy(*args)
        )
        # The public access block must be in place before a policy is attached.
        return aws.s3.BucketPolicy(
            resource_name=self._child_name(node),
            bucket=bucket.id,
            policy=policy,
            opts=self._child_opts(
                depends_on=[self.resources[plan.PUBLIC_ACCESS_BLOCK]],
            ),
        )

    def _certificate(self, node: ResourceNode):
        sans = list(node.props["subject_alternative_names"])
        return aws.acm.Certificate(
            resource_name=self._child_name(node),
            domain_name=node.props["domain_name"],
            subject_alternative_names=sans or None,
            validation_method="DNS",
            opts=self._child_opts(),
        )

    def _validation_record(self, node: ResourceNode):
        certificate = self.resources[plan.CERTIFICATE]
        zone = self.resources[plan.ZONE]
        domain = node.props["domain_name"]

        # ACM returns one validation option per certificate domain; pick ours
        # by name since the provider does not keep the request order.
        option = certificate.domain_validation_options.apply(
            lambda options: next(o for o in options if o.domain_name == domain)
        )
        return aws.route53.Record(
            resource_name=self._child_name(node),
            zone_id=zone.zone_id,
            name=option.resource_record_name,
            type=option.resource_record_type,
            records=[option.resource_record_value],
            ttl=VALIDATION_RECORD_TTL,
            allow_overwrite=True,
            opts=self._child_opts(),
        )

    def _certificate_validation(self, node: ResourceNode):
        records = [
            self.resources[key]
            for key in node.depends_on
            if key != plan.CERTIFICATE
        ]
        return aws.acm.CertificateValidation(
            resource_name=self._child_name(node),
            certificate_arn=self.resources[plan.CERTIFICATE].arn,
            validation_record_fqdns=[record.fqdn for record in records],
            opts=self._child_opts(),
        )

    def _distribution(self, node: ResourceNode):
        bucket = self.resources[plan.BUCKET]
        oai = self.resources[plan.ORIGIN_ACCESS_IDENTITY]
        validation = self.resources[plan.CERTIFICATE_VALIDATION]

        origins = [
            aws.cloudfront.DistributionOriginArgs(
                domain_name=bucket.bucket_regional_domain_name,
                origin_id=S3_ORIGIN_ID,
                s3_origin_config=aws.cloudfront.DistributionOriginS3OriginConfigArgs(
                    origin_access_identity=oai.cloudfront_access_identity_path,
                ),
            )
        ]

        # ForwardedValues is required by the API when not using a cache policy.
        forwarded_values = aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesArgs(
            query_string=False,
            cookies=aws.cloudfront.DistributionDefaultCacheBehaviorForwardedValuesCookiesArgs(
                forward="none",
            ),
        )
        default_cache_behavior = aws.cloudfront.DistributionDefaultCacheBehaviorArgs(
            target_origin_id=S3_ORIGIN_ID,
            viewer_protocol_policy="redirect-to-https",
            allowed_methods=["GET", "HEAD", "OPTIONS"],
            cached_methods=["GET", "HEAD"],
            compress=True,
            forwarded_values=forwarded_values,
        )

        custom_error_responses = [
            aws.cloudfront.DistributionCustomErrorResponseArgs(
                error_code=response.http_status,
                response_code=response.response_http_status,
                response_page_path=response.response_page_path,
                error_caching_min_ttl=response.ttl_seconds,
            )
            for response in node.props["error_responses"]
        ]

        restrictions = aws.cloudfront.DistributionRestrictionsArgs(
            geo_restriction=aws.cloudfront.DistributionRestrictionsGeoRestrictionArgs(
                restriction_type="none",
            ),
        )

        # certificate_arn comes from the validation resource so the
        # distribution waits until ACM has issued the certificate.
        viewer_certificate = aws.cloudfront.DistributionViewerCertificateArgs(
            acm_certificate_arn=validation.certificate_arn,
            ssl_support_method="sni-only",
            minimum_protocol_version="TLSv1.2_2021",
        )

        return aws.cloudfront.Distribution(
            resource_name=self._child_name(node),
            enabled=True,
            aliases=list(node.props["aliases"]),
            default_root_object=node.props["default_root_object"],
            origins=origins,
            default_cache_behavior=default_cache_behavior,
            custom_error_responses=custom_error_responses,
            restrictions=restrictions,
            viewer_certificate=viewer_certificate,
            opts=self._child_opts(),
        )

    def _alias_record(self, node: ResourceNode):
        zone = self.resources[plan.ZONE]
        distribution = self.resources[plan.DISTRIBUTION]
        return aws.route53.Record(
            resource_name=self._child_name(node),
            zone_id=zone.zone_id,
            name=node.props["name"],
            type="A",
            aliases=[
                aws.route53.RecordAliasArgs(
                    name=distribution.domain_name,
                    zone_id=distribution.hosted_zone_id,
                    evaluate_target_health=False,
                )
            ],
            opts=self._child_opts(),
        )
