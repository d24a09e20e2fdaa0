"""Token lifecycle engine.

Allocation, minting, custody transfer, retirement and enumeration over the
repository layer. Nothing here knows about HTTP.
"""
