"""Adapters connecting the reconciliation core to directories and files."""
