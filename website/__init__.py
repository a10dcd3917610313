"""
Static website infrastructure: S3 + CloudFront + ACM + Route 53.

The pure pieces are usable without a Pulumi stack; the AWS component turns
their output into resources. Use from the Pulumi entrypoint (__main__.py):

- **resolve**: SiteConfig (production or non-production variant) ->
  ResolvedSite with the site domain, certificate SANs, CDN aliases and DNS
  record names.
- **build_plan / provisioning_order**: ResolvedSite -> dependency-ordered
  resource descriptions.
- **StaticWebsite**: ComponentResource that creates every planned resource
  through a provider pinned to us-east-1 (``pinned_provider``).
"""

from website.aws import StaticWebsite, pinned_provider
from website.errors import ConfigurationError, ProvisioningError, WebsiteError
from website.plan import ResourceKind, ResourceNode, build_plan, provisioning_order
from website.resolver import (
    NonProdSiteConfig,
    ProdSiteConfig,
    ResolvedSite,
    SiteConfig,
    resolve,
    site_config,
)

__all__ = [
    "ConfigurationError",
    "NonProdSiteConfig",
    "ProdSiteConfig",
    "ProvisioningError",
    "ResolvedSite",
    "ResourceKind",
    "ResourceNode",
    "SiteConfig",
    "StaticWebsite",
    "WebsiteError",
    "build_plan",
    "pinned_provider",
    "provisioning_order",
    "resolve",
    "site_config",
]
