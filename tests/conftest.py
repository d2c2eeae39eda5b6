"""Pytest bootstrap configuration.

Ensure environment variables are set before test collection and module
imports that depend on application settings.
"""
import os

# Local fake servers speak plaintext
os.environ.setdefault("GRPC__TLS__ENABLED", "false")
os.environ.setdefault("TRANSLATION__PROJECT_ID", "test-project")
os.environ.setdefault("BUNDLE_IDENTIFIER", "com.example.tests")
