"""Tests for the resource plan and its provisioning order"""

import pytest

from website import (
    ProvisioningError,
    ResourceKind,
    ResourceNode,
    build_plan,
    provisioning_order,
    resolve,
    site_config,
)
from website import plan


def _kinds(nodes, kind):
    return [node for node in nodes if node.kind is kind]


class TestBuildPlan:
    def test_prod_plans_two_validation_and_alias_records(self):
        nodes = build_plan(resolve(site_config("example.com", True)))

        records = _kinds(nodes, ResourceKind.ALIAS_RECORD)
        assert [r.props["name"] for r in records] == ["www.example.com", "example.com"]
        validations = _kinds(nodes, ResourceKind.CERTIFICATE_VALIDATION_RECORD)
        assert [v.props["domain_name"] for v in validations] == [
            "www.example.com",
            "example.com",
        ]

    def test_dev_plans_one_of_each(self):
        nodes = build_plan(resolve(site_config("example.com", False, "dev")))

        assert len(_kinds(nodes, ResourceKind.ALIAS_RECORD)) == 1
        assert len(_kinds(nodes, ResourceKind.CERTIFICATE_VALIDATION_RECORD)) == 1

    def test_site_domain_drives_bucket_certificate_and_aliases(self):
        site = resolve(site_config("example.com", False, "dev"))
        nodes = {node.key: node for node in build_plan(site)}

        assert nodes[plan.BUCKET].props["bucket"] == "dev.example.com"
        assert nodes[plan.CERTIFICATE].props["domain_name"] == "dev.example.com"
        assert nodes[plan.CERTIFICATE].props["subject_alternative_names"] == ()
        assert nodes[plan.DISTRIBUTION].props["aliases"] == ("dev.example.com",)
        assert nodes[plan.ZONE].props["name"] == "example.com"

    def test_distribution_waits_for_validated_certificate(self):
        nodes = {n.key: n for n in build_plan(resolve(site_config("example.com", True)))}
        assert plan.CERTIFICATE_VALIDATION in nodes[plan.DISTRIBUTION].depends_on
        assert set(nodes[plan.BUCKET_POLICY].depends_on) >= {
            plan.BUCKET,
            plan.ORIGIN_ACCESS_IDENTITY,
        }

    def test_validation_records_carry_only_their_domain(self):
        nodes = build_plan(resolve(site_config("example.com", True)))
        for node in _kinds(nodes, ResourceKind.CERTIFICATE_VALIDATION_RECORD):
            assert dict(node.props) == {"domain_name": node.props["domain_name"]}

    def test_plan_is_deterministic(self):
        site = resolve(site_config("example.com", True))
        assert build_plan(site) == build_plan(site)


class TestProvisioningOrder:
    def test_plan_is_already_ordered(self):
        nodes = build_plan(resolve(site_config("example.com", True)))
        ordered = provisioning_order(nodes)

        assert ordered == list(nodes)
        assert [n.kind for n in ordered[:6]] == [
            ResourceKind.ZONE_LOOKUP,
            ResourceKind.ORIGIN_ACCESS_IDENTITY,
            ResourceKind.BUCKET,
            ResourceKind.PUBLIC_ACCESS_BLOCK,
            ResourceKind.BUCKET_POLICY,
            ResourceKind.CERTIFICATE,
        ]
        assert ordered[-1].kind is ResourceKind.ALIAS_RECORD

    def test_dependencies_come_first(self):
        nodes = build_plan(resolve(site_config("example.com", True)))
        ordered = provisioning_order(reversed(nodes))

        seen = set()
        for node in ordered:
            assert seen.issuperset(node.depends_on)
            seen.add(node.key)

    def test_unknown_dependency(self):
        nodes = [ResourceNode("a", ResourceKind.BUCKET, depends_on=("missing",))]
        with pytest.raises(ProvisioningError, match="missing"):
            provisioning_order(nodes)

    def test_cycle(self):
        nodes = [
            ResourceNode("a", ResourceKind.BUCKET, depends_on=("b",)),
            ResourceNode("b", ResourceKind.BUCKET_POLICY, depends_on=("a",)),
        ]
        with pytest.raises(ProvisioningError, match="cycle"):
            provisioning_order(nodes)

    def test_duplicate_key(self):
        nodes = [
            ResourceNode("a", ResourceKind.BUCKET),
            ResourceNode("a", ResourceKind.BUCKET_POLICY),
        ]
        with pytest.raises(ProvisioningError, match="Duplicate"):
            provisioning_order(nodes)
