"""
Quote System Test Suite
========================

This package contains comprehensive tests for the Quote System including:
- Unit tests for individual components
- Integration tests for component interactions
- Performance tests for system optimization
- End-to-end tests for complete workflows
"""