"""Equipment lifecycle ledger: cohorts, personnel, checkouts and damage reports."""

__version__ = "0.1.0"
