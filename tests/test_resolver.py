"""Tests for the site configuration resolver"""

import pytest

from website import (
    ConfigurationError,
    NonProdSiteConfig,
    ProdSiteConfig,
    resolve,
    site_config,
)


class TestProduction:
    def test_scenario_www_and_apex(self):
        site = resolve(ProdSiteConfig(domain_name="example.com"))

        assert site.effective_sub_domain == "www"
        assert site.site_domain == "www.example.com"
        assert site.certificate_domains == ("www.example.com", "example.com")
        assert site.distribution_domains == site.certificate_domains
        assert site.dns_records == ("www.example.com", "example.com")

    def test_subdomain_is_ignored(self):
        for sub_domain in ("dev", "staging", "", None):
            site = resolve(site_config("example.com", True, sub_domain))
            assert site.effective_sub_domain == "www"
            assert site.site_domain == "www.example.com"

    def test_certificate_sans_hold_only_apex(self):
        site = resolve(ProdSiteConfig(domain_name="example.com"))
        assert site.certificate_domains[0] == site.site_domain
        assert site.certificate_sans == ("example.com",)

    def test_site_url_and_bucket(self):
        site = resolve(ProdSiteConfig(domain_name="example.com"))
        assert site.site_url == "https://www.example.com"
        assert site.bucket_name == "www.example.com"


class TestNonProduction:
    def test_scenario_dev_subdomain_only(self):
        site = resolve(NonProdSiteConfig(domain_name="example.com", site_sub_domain="dev"))

        assert site.effective_sub_domain == "dev"
        assert site.site_domain == "dev.example.com"
        assert site.certificate_domains == ("dev.example.com",)
        assert site.certificate_sans == ()
        assert site.dns_records == ("dev.example.com",)

    def test_apex_never_included(self):
        for sub_domain in ("dev", "staging", "qa.internal"):
            site = resolve(site_config("example.com", False, sub_domain))
            assert site.site_domain == f"{sub_domain}.example.com"
            assert "example.com" not in site.certificate_domains
            assert "example.com" not in site.distribution_domains
            assert "example.com" not in site.dns_records

    def test_site_domain_used_for_every_name(self):
        site = resolve(site_config("example.com", False, "dev"))
        assert site.bucket_name == site.certificate_domains[0]
        assert site.distribution_domains == (site.site_domain,)
        assert site.dns_records == (site.site_domain,)


class TestValidation:
    @pytest.mark.parametrize("sub_domain", ["", "   ", None])
    def test_non_prod_requires_subdomain(self, sub_domain):
        with pytest.raises(ConfigurationError, match="site_sub_domain"):
            site_config("example.com", False, sub_domain)

    def test_non_prod_variant_requires_subdomain(self):
        with pytest.raises(ConfigurationError, match="site_sub_domain"):
            NonProdSiteConfig(domain_name="example.com", site_sub_domain="")

    @pytest.mark.parametrize("is_prod", [True, False])
    def test_domain_name_required(self, is_prod):
        with pytest.raises(ConfigurationError, match="domain_name"):
            site_config("", is_prod, "dev")

    def test_empty_label_rejected(self):
        with pytest.raises(ConfigurationError, match="site_sub_domain"):
            site_config("example.com", False, ".dev")

    def test_domain_normalised(self):
        config = site_config(" Example.com. ", False, "Dev")
        assert config.domain_name == "example.com"
        assert config.site_sub_domain == "dev"
        assert resolve(config).site_domain == "dev.example.com"


class TestPurity:
    def test_resolving_twice_is_identical(self):
        for config in (
            ProdSiteConfig(domain_name="example.com"),
            NonProdSiteConfig(domain_name="example.com", site_sub_domain="dev"),
        ):
            assert resolve(config) == resolve(config)

    def test_variant_discriminator(self):
        assert ProdSiteConfig(domain_name="example.com").is_prod is True
        assert NonProdSiteConfig("example.com", "dev").is_prod is False
