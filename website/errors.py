"""
Error types raised by the website stack.

Both derive from ``pulumi.RunError`` so the Pulumi CLI reports them as a
plain message instead of a Python traceback.
"""

import pulumi


class WebsiteError(pulumi.RunError):
    """Base class for errors raised by this project."""


class ConfigurationError(WebsiteError):
    """Missing or invalid stack input. Raised before any resource is registered."""


class ProvisioningError(WebsiteError):
    """The resource graph cannot be walked (unknown dependency, cycle, duplicate key)."""
