"""Domain layer: directory records, reconciliation core and remediation services."""
