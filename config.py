"""
Stack configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings. Settings are read from
Pulumi config (Pulumi.<stack>.yaml or pulumi config set); ``domain_name`` and
``account_id`` fall back to the DOMAIN_NAME and ACCOUNT_ID (or CDK_ACCOUNT)
environment variables, after loading a ``.env`` file from the working
directory with python-dotenv. Variables already set in the environment win
over the ``.env`` file. A missing required setting raises ConfigurationError
before any resource is declared, instead of letting an empty domain flow into
bucket, certificate and DNS names. Used by __main__.main() to build the SiteConfig
and the pinned AWS provider.
"""

import os
from dataclasses import dataclass
from typing import Any, Callable

import pulumi
from dotenv import find_dotenv, load_dotenv

from website import ConfigurationError, SiteConfig, site_config

# Config key -> environment variables consulted, in order, when the key is unset.
_ENV_FALLBACKS: dict[str, tuple[str, ...]] = {
    "domain_name": ("DOMAIN_NAME",),
    "account_id": ("ACCOUNT_ID", "CDK_ACCOUNT"),
}

_TRUE = ("1", "true", "yes")
_FALSE = ("0", "false", "no")


def _get_str(config: pulumi.Config, key: str) -> str | None:
    raw = config.get(key)
    if raw is None:
        fallbacks = (os.environ.get(name) for name in _ENV_FALLBACKS.get(key, ()))
        raw = next((value for value in fallbacks if value and value.strip()), None)
    if raw is None or not str(raw).strip():
        return None
    return str(raw).strip()


def _require_str(config: pulumi.Config, key: str) -> str:
    value = _get_str(config, key)
    if value is None:
        hint = ""
        if key in _ENV_FALLBACKS:
            names = " or ".join(_ENV_FALLBACKS[key])
            hint = f" (or environment variable {names})"
        raise ConfigurationError(f"Missing required configuration key '{key}'{hint}")
    return value


def _require_bool(config: pulumi.Config, key: str) -> bool:
    raw = config.get(key)
    if isinstance(raw, bool):
        return raw
    value = _require_str(config, key).lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(
        f"Configuration key '{key}' must be a boolean, got {raw!r}"
    )


# (key, parser); parser receives (config, key) and returns value.
_CONFIG_SPEC: list[tuple[str, Callable[[pulumi.Config, str], Any]]] = [
    ("domain_name", _require_str),
    ("is_prod", _require_bool),
    ("site_sub_domain", _get_str),
    ("account_id", _get_str),
]


@dataclass(frozen=True)
class StackConfig:
    """
    Stack configuration from Pulumi config.

    Attributes:
        domain_name: Registered apex domain with a Route 53 hosted zone (required).
        is_prod: True for the production site (www + apex) (required).
        site_sub_domain: Subdomain of a non-production site, e.g. "dev"
            (required when is_prod is false, ignored otherwise).
        account_id: AWS account the stack may deploy to (optional).
    """

    domain_name: str
    is_prod: bool
    site_sub_domain: str | None = None
    account_id: str | None = None

    @classmethod
    def from_pulumi_config(
        cls,
        config: pulumi.Config,
        dotenv_path: str | None = None,
    ) -> "StackConfig":
        """
        Build StackConfig from pulumi.Config(). Required keys raise
        ConfigurationError when missing.

        Args:
            config: Stack config.
            dotenv_path: ``.env`` file to load before reading environment
                fallbacks; defaults to the nearest one from the working
                directory upwards.
        """
        dotenv_path = dotenv_path or find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path)
        kwargs = {key: parser(config, key) for key, parser in _CONFIG_SPEC}
        return cls(**kwargs)

    def site_config(self) -> SiteConfig:
        """
        Return the resolver input for this stack.

        Raises:
            ConfigurationError: non-production stack without site_sub_domain.
        """
        if self.is_prod and self.site_sub_domain:
            pulumi.log.warn(
                f"site_sub_domain '{self.site_sub_domain}' is ignored in production; "
                "the site is served from www"
            )
        return site_config(
            domain_name=self.domain_name,
            is_prod=self.is_prod,
            site_sub_domain=self.site_sub_domain,
        )
