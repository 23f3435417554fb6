"""Core functionality: project loading, deploy reconciliation, listing and export."""
