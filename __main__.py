"""
Static website - Pulumi entrypoint.

One program, two stacks that differ only in config:

- **prod**: ``is_prod: true``; serves www.<domain> and the apex <domain>.
- **dev**: ``is_prod: false``, ``site_sub_domain: dev``; serves
  dev.<domain> only.

Config is validated and resolved before any resource is declared, then a
single StaticWebsite component is created through an AWS provider pinned to
us-east-1 (ACM certificates for CloudFront must live there).

Stack exports: site, bucket, distribution_domain_name.
"""

import pulumi

from config import StackConfig
from website import StaticWebsite, pinned_provider, resolve


def main():
    """
    Resolve the site from stack config, build it and export its outputs.
    """
    config = StackConfig.from_pulumi_config(pulumi.Config())
    site = resolve(config.site_config())
    stack = pulumi.get_stack()

    pulumi.log.info(
        f"Deploying {site.site_domain} (aliases: {', '.join(site.distribution_domains)})"
    )

    provider = pinned_provider(f"aws-{stack}", account_id=config.account_id)
    website = StaticWebsite(
        name=f"website-{stack}",
        site=site,
        provider=provider,
    )

    for output_name, value in [
        ("site", website.site_url),
        ("bucket", website.bucket_name),
        ("distribution_domain_name", website.distribution_domain_name),
    ]:
        pulumi.export(output_name, value)


if __name__ == "__main__":
    main()
