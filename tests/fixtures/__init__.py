"""
Test Fixtures and Utilities

Shared test data and helpers for the test suite.

This module provides:
- LedgerBuilder for assembling small ledgers record by record
- The ten-day scenario ledger
- A seeded synthetic household ledger generator

All test data is synthetic and does not contain real financial information.
"""
