"""
Command Line Interface Package

Command Structure:
- homeledger: Main entry point with utility commands (version, config)
- homeledger analyze: Full or date-range analysis with CSV/JSON reports
- homeledger snapshot: Point-in-time balances
- homeledger chargeable: Chargeable gains with top-sliced tax apportionment
- homeledger chart: Valuation over time chart

Ledger commands take an optional ledger file; without one they load the
configured ledger from the data directory.
"""
