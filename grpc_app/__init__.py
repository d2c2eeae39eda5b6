"""gRPC transport layer for the cloud clients.

This package hosts:
- Channel bootstrap (TLS, message limits, client interceptors).
- Stubs binding Google Cloud method paths to their message types.
- Request metadata helpers (authorization and bundle-identifier headers).
- Mappers from gRPC statuses to business exceptions.
"""
