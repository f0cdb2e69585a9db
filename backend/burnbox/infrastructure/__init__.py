"""
Infrastructure Layer

Redis, Google Cloud Storage and local filesystem implementations of the
domain repository interfaces.
"""
