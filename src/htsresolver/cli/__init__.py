"""Command-line interface for the HTS duty-rate resolver."""
