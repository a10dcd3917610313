"""
Pure helpers for domain naming, bucket policy and error pages. Testable
without Pulumi runtime.

Used by the resolver (normalize_domain, subdomain_fqdn, https_url), the
resource plan (resource_slug) and the AWS component (bucket_read_policy,
SPA_ERROR_RESPONSES). No Pulumi types; all functions accept and return plain
Python types so they can be unit-tested without a Pulumi stack.
"""

import json
import re
from dataclasses import dataclass


def normalize_domain(
    domain: str,
) -> str:
    """
    Return domain trimmed, lower-cased and without a trailing dot.

    Route 53, ACM and CloudFront all accept names without the trailing dot;
    normalising once keeps the bucket name, certificate domain, CDN alias and
    record name byte-identical.
    """
    return domain.strip().lower().rstrip(".")


def subdomain_fqdn(
    domain: str,
    subdomain: str,
) -> str:
    """
    Build a host name like 'www.example.com' from domain and subdomain.

    Args:
        domain: Apex domain (e.g. "example.com"); normalised first.
        subdomain: Leading label(s) (e.g. "www", "dev").

    Returns:
        Host name without trailing dot (e.g. "www.example.com").
    """
    return f"{normalize_domain(subdomain)}.{normalize_domain(domain)}"


def https_url(
    host: str,
) -> str:
    return f"https://{host}"


def resource_slug(
    domain: str,
) -> str:
    """
    Produce a Pulumi-resource-name-safe slug from a host name.

    Dots and any character outside [a-z0-9-] become hyphens, runs of hyphens
    collapse to one ("www.example.com" -> "www-example-com").
    """
    slug = re.sub(r"[^a-z0-9-]", "-", normalize_domain(domain))
    return re.sub(r"-{2,}", "-", slug).strip("-")


def bucket_read_policy(
    bucket_arn: str,
    canonical_user_id: str,
) -> str:
    """
    Return the JSON bucket policy that lets only the origin access identity
    read objects.

    Args:
        bucket_arn: ARN of the site bucket (e.g. "arn:aws:s3:::www.example.com").
        canonical_user_id: S3 canonical user id of the CloudFront origin
            access identity.

    Returns:
        Policy document granting s3:GetObject on every object and nothing else.
    """
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": "AllowCloudFrontOriginAccessIdentityRead",
                    "Effect": "Allow",
                    "Principal": {"CanonicalUser": canonical_user_id},
                    "Action": "s3:GetObject",
                    "Resource": f"{bucket_arn}/*",
                }
            ],
        }
    )


@dataclass(frozen=True)
class ErrorResponse:
    """CloudFront custom error response: origin status rewritten to a page."""

    http_status: int
    response_http_status: int
    response_page_path: str
    ttl_seconds: int


INDEX_DOCUMENT: str = "index.html"

# Client-side routing: any 403/404 from the origin returns the app entry
# document as a fresh 200. TTL 0 so the rewritten response is never cached.
SPA_ERROR_RESPONSES: tuple[ErrorResponse, ...] = (
    ErrorResponse(
        http_status=404,
        response_http_status=200,
        response_page_path=f"/{INDEX_DOCUMENT}",
        ttl_seconds=0,
    ),
    ErrorResponse(
        http_status=403,
        response_http_status=200,
        response_page_path=f"/{INDEX_DOCUMENT}",
        ttl_seconds=0,
    ),
)
