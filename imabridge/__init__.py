"""
IMA token tooling - clone token deployment, role checks and role grants for
SKALE Interchain Messaging Agent token mapping.
"""

__version__ = "0.1.0"
