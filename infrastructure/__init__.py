"""
Infrastructure Package
======================

Adapters for external dependencies, kept behind small interfaces so the
domain services never talk to boto3 or the filesystem directly.

Modules:
    - storage: File storage abstraction (S3, local filesystem)
    - container: Service container wiring domain services to their adapters
"""
