"""
Site configuration resolver: derive every domain-dependent value of the stack.

The input is a tagged union of two variants:

- ``ProdSiteConfig``: serves ``www.<domain>`` and the bare apex ``<domain>``.
- ``NonProdSiteConfig``: serves ``<site_sub_domain>.<domain>`` only; the apex
  is never reachable from a non-production stack.

``resolve`` is a pure function of that input. Its ``ResolvedSite`` result is
what the AWS component and the resource plan are parameterised by, so the
same ``site_domain`` string ends up as bucket name, certificate domain, CDN
alias and DNS record name.
"""

from dataclasses import dataclass

from website._helpers import https_url, normalize_domain, subdomain_fqdn
from website.errors import ConfigurationError

PROD_SUB_DOMAIN: str = "www"


def _require_domain(value: str | None, field: str) -> str:
    domain = normalize_domain(value or "")
    if not domain:
        raise ConfigurationError(f"Missing required site setting '{field}'")
    if any(not label for label in domain.split(".")):
        raise ConfigurationError(
            f"Invalid value for '{field}': {value!r} contains an empty label"
        )
    return domain


@dataclass(frozen=True)
class ProdSiteConfig:
    """Production site: ``www`` subdomain plus the apex domain."""

    domain_name: str

    def __post_init__(self):
        object.__setattr__(
            self, "domain_name", _require_domain(self.domain_name, "domain_name")
        )

    @property
    def is_prod(self) -> bool:
        return True


@dataclass(frozen=True)
class NonProdSiteConfig:
    """Non-production site (dev, staging, ...) served under its own subdomain."""

    domain_name: str
    site_sub_domain: str

    def __post_init__(self):
        object.__setattr__(
            self, "domain_name", _require_domain(self.domain_name, "domain_name")
        )
        object.__setattr__(
            self,
            "site_sub_domain",
            _require_domain(self.site_sub_domain, "site_sub_domain"),
        )

    @property
    def is_prod(self) -> bool:
        return False


SiteConfig = ProdSiteConfig | NonProdSiteConfig


def site_config(
    domain_name: str,
    is_prod: bool,
    site_sub_domain: str | None = None,
) -> SiteConfig:
    """
    Build the SiteConfig variant matching ``is_prod``.

    In production ``site_sub_domain`` is ignored: the site is always served
    from ``www``. Outside production it is required.

    Raises:
        ConfigurationError: domain_name is empty, or site_sub_domain is empty
            for a non-production site.
    """
    if is_prod:
        return ProdSiteConfig(domain_name=domain_name)
    return NonProdSiteConfig(
        domain_name=domain_name,
        site_sub_domain=site_sub_domain or "",
    )


@dataclass(frozen=True)
class ResolvedSite:
    """
    Every domain-dependent value of one site.

    Attributes:
        apex_domain: Registered apex domain; also the Route 53 zone name.
        effective_sub_domain: "www" in production, else the configured one.
        site_domain: ``<effective_sub_domain>.<apex_domain>``.
        certificate_domains: Certificate primary domain first, then SANs.
        distribution_domains: CloudFront aliases; same set as the certificate.
        dns_records: Names of the alias records pointing at CloudFront.
    """

    apex_domain: str
    effective_sub_domain: str
    site_domain: str
    certificate_domains: tuple[str, ...]
    distribution_domains: tuple[str, ...]
    dns_records: tuple[str, ...]

    @property
    def site_url(self) -> str:
        return https_url(self.site_domain)

    @property
    def bucket_name(self) -> str:
        return self.site_domain

    @property
    def certificate_sans(self) -> tuple[str, ...]:
        return self.certificate_domains[1:]


def resolve(config: SiteConfig) -> ResolvedSite:
    """
    Derive the site domain, certificate SANs, CDN aliases and DNS records.

    Production includes the apex domain alongside ``www.<domain>`` in the
    certificate, the distribution and DNS. Non-production includes only the
    subdomain host.
    """
    if config.is_prod:
        sub_domain = PROD_SUB_DOMAIN
    else:
        sub_domain = config.site_sub_domain

    site_domain = subdomain_fqdn(config.domain_name, sub_domain)
    domains = (site_domain, config.domain_name) if config.is_prod else (site_domain,)

    return ResolvedSite(
        apex_domain=config.domain_name,
        effective_sub_domain=sub_domain,
        site_domain=site_domain,
        certificate_domains=domains,
        distribution_domains=domains,
        dns_records=domains,
    )
