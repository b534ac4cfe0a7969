"""Concrete taxonomy providers."""

from mailwright.reconciliation.providers.gmail import GmailLabelProvider
from mailwright.reconciliation.providers.mock import MockTaxonomyProvider
from mailwright.reconciliation.providers.outlook import OutlookFolderProvider

__all__ = ["GmailLabelProvider", "MockTaxonomyProvider", "OutlookFolderProvider"]
