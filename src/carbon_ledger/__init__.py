"""Carbon credit token ledger: issuance, custody transfer and retirement."""

__version__ = "1.0.0"
