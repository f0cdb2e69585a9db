"""
Tests package for the BurnBox backend.

This package contains test suites organized by type:
- unit/: Fast tests against in-memory collaborators
- contracts/: Contract tests for repository interfaces
- integration/: Integration tests with real services
- property/: Property-based tests using Hypothesis
"""
