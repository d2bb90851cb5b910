"""Packaged configuration defaults (``default_settings.yaml``)."""
