# Shared Common Library for the marina platform.
# Cross-service plumbing used by the services under services/:
# exceptions, JWT authentication, permissions, middleware
# and model mixins.

__version__ = "1.0.0"
