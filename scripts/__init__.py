"""
Scripts Package.

This package contains operational scripts for the transaction ledger.

Scripts:
- bootstrap_db: Database initialization
- ingest_tx: Classify and record transactions from the command line
"""

# Scripts are meant to be run directly, not imported
