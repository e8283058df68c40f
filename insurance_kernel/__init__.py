"""
Insurance Kernel

Lifecycle management for insurance contracts:
- Contract, Payment and DocumentVerification state machines
- Verification gating before contract activation
- Payment-triggered activation
- Typed errors and structured logging throughout
"""

__version__ = "0.1.0"
