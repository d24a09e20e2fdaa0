"""Domain layer for the carbon ledger.

Contains the error taxonomy, token read models and ledger events.
This layer has no dependencies on infrastructure concerns.
"""
