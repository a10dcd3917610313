"""
Resource plan: the site's resources as an explicit dependency graph.

``build_plan`` turns a ``ResolvedSite`` into plain ``ResourceNode`` values,
each naming the nodes whose outputs it consumes. ``provisioning_order`` walks
that graph; the AWS component then creates one Pulumi resource per node in
that order. Keeping the graph as data means the shape of the stack (which
records, which SANs, what depends on what) can be asserted on in tests
without a Pulumi engine.
"""

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from website._helpers import INDEX_DOCUMENT, SPA_ERROR_RESPONSES, resource_slug
from website.errors import ProvisioningError
from website.resolver import ResolvedSite


class ResourceKind(enum.Enum):
    ZONE_LOOKUP = "zone-lookup"
    ORIGIN_ACCESS_IDENTITY = "origin-access-identity"
    BUCKET = "bucket"
    PUBLIC_ACCESS_BLOCK = "public-access-block"
    BUCKET_POLICY = "bucket-policy"
    CERTIFICATE = "certificate"
    CERTIFICATE_VALIDATION_RECORD = "certificate-validation-record"
    CERTIFICATE_VALIDATION = "certificate-validation"
    DISTRIBUTION = "distribution"
    ALIAS_RECORD = "alias-record"


@dataclass(frozen=True)
class ResourceNode:
    """
    One resource to provision.

    Attributes:
        key: Unique name within the plan; also the Pulumi resource name suffix.
        kind: Which builder creates the resource.
        depends_on: Keys of the nodes whose outputs this resource consumes.
        props: Plain-value inputs derived from the resolved site.
    """

    key: str
    kind: ResourceKind
    depends_on: tuple[str, ...] = ()
    props: Mapping[str, Any] = field(default_factory=dict)


ZONE = "zone"
ORIGIN_ACCESS_IDENTITY = "origin-access-identity"
BUCKET = "site-bucket"
PUBLIC_ACCESS_BLOCK = "site-bucket-public-access-block"
BUCKET_POLICY = "site-bucket-policy"
CERTIFICATE = "site-certificate"
CERTIFICATE_VALIDATION = "site-certificate-validation"
DISTRIBUTION = "site-distribution"


def build_plan(site: ResolvedSite) -> tuple[ResourceNode, ...]:
    """
    Return every resource for ``site``, listed in provisioning order.

    One certificate validation record is planned per certificate domain and
    one alias record per DNS record name, so a production site gets two of
    each and a non-production site one.
    """
    validation_records = tuple(
        ResourceNode(
            key=f"{CERTIFICATE}-validation-{resource_slug(domain)}",
            kind=ResourceKind.CERTIFICATE_VALIDATION_RECORD,
            depends_on=(CERTIFICATE, ZONE),
            props={"domain_name": domain},
        )
        for domain in site.certificate_domains
    )
    alias_records = tuple(
        ResourceNode(
            key=f"alias-record-{resource_slug(record_name)}",
            kind=ResourceKind.ALIAS_RECORD,
            depends_on=(ZONE, DISTRIBUTION),
            props={"name": record_name},
        )
        for record_name in site.dns_records
    )

    return (
        ResourceNode(
            key=ZONE,
            kind=ResourceKind.ZONE_LOOKUP,
            props={"name": site.apex_domain},
        ),
        ResourceNode(
            key=ORIGIN_ACCESS_IDENTITY,
            kind=ResourceKind.ORIGIN_ACCESS_IDENTITY,
            props={"comment": f"OAI for {site.site_domain}"},
        ),
        ResourceNode(
            key=BUCKET,
            kind=ResourceKind.BUCKET,
            props={"bucket": site.bucket_name},
        ),
        ResourceNode(
            key=PUBLIC_ACCESS_BLOCK,
            kind=ResourceKind.PUBLIC_ACCESS_BLOCK,
            depends_on=(BUCKET,),
        ),
        ResourceNode(
            key=BUCKET_POLICY,
            kind=ResourceKind.BUCKET_POLICY,
            depends_on=(BUCKET, ORIGIN_ACCESS_IDENTITY, PUBLIC_ACCESS_BLOCK),
        ),
        ResourceNode(
            key=CERTIFICATE,
            kind=ResourceKind.CERTIFICATE,
            depends_on=(ZONE,),
            props={
                "domain_name": site.site_domain,
                "subject_alternative_names": site.certificate_sans,
            },
        ),
        *validation_records,
        ResourceNode(
            key=CERTIFICATE_VALIDATION,
            kind=ResourceKind.CERTIFICATE_VALIDATION,
            depends_on=(CERTIFICATE, *(node.key for node in validation_records)),
        ),
        ResourceNode(
            key=DISTRIBUTION,
            kind=ResourceKind.DISTRIBUTION,
            depends_on=(BUCKET, ORIGIN_ACCESS_IDENTITY, CERTIFICATE_VALIDATION),
            props={
                "aliases": site.distribution_domains,
                "default_root_object": INDEX_DOCUMENT,
                "error_responses": SPA_ERROR_RESPONSES,
            },
        ),
        *alias_records,
    )


def provisioning_order(plan: Iterable[ResourceNode]) -> list[ResourceNode]:
    """
    Order ``plan`` so every node comes after the nodes it depends on.

    The order is stable: among nodes whose dependencies are satisfied, the
    one listed first in ``plan`` goes first, so a plan that is already
    ordered comes back unchanged.

    Raises:
        ProvisioningError: duplicate key, dependency on a key not in the
            plan, or a dependency cycle.
    """
    pending = list(plan)
    keys = [node.key for node in pending]
    duplicates = sorted({key for key in keys if keys.count(key) > 1})
    if duplicates:
        raise ProvisioningError(f"Duplicate resource keys in plan: {duplicates}")

    known = set(keys)
    for node in pending:
        missing = [dep for dep in node.depends_on if dep not in known]
        if missing:
            raise ProvisioningError(
                f"Resource '{node.key}' depends on unknown resources: {missing}"
            )

    ordered: list[ResourceNode] = []
    done: set[str] = set()
    while pending:
        ready = next(
            (node for node in pending if done.issuperset(node.depends_on)), None
        )
        if ready is None:
            raise ProvisioningError(
                "Dependency cycle between resources: "
                f"{sorted(node.key for node in pending)}"
            )
        pending.remove(ready)
        done.add(ready.key)
        ordered.append(ready)
    return ordered
