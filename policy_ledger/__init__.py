"""
Policy Ledger
=============

Insurance policy lifecycle engine for transactional key-value stores.

This package allocates policy identifiers, computes maturity coverage,
collects installment premiums and settles claims and cancellations inside
a host-supplied transaction.
"""

__version__ = "0.1.0"
__author__ = "Policy Ledger"
