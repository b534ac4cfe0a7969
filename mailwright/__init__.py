"""Mailwright: multi-business email onboarding configuration.

Merges per-business-type classification, behavior, and taxonomy schemas
into one deployment configuration, reconciles the taxonomy against a live
mailbox, and renders the result into a workflow template.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
