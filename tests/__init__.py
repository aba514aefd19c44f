"""Test suite for pagechain.

Test Structure:
- unit/: Unit tests for individual components
  - pagination/: driver, front ends, sessions and loop binding
  - api/http/: HTTP page executor
  - config/: configuration loading
- integration/: pagination sessions driven through the HTTP executor
- fixtures/: in-memory list operations
- conftest.py: Shared fixtures and test configuration
"""
