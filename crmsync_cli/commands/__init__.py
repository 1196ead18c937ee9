"""crm-sync CLI commands."""
