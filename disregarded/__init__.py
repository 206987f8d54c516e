"""
Disregarded - a small multi-user essay service.

Accounts write essays as drafts and publish them when ready; published
essays are public, drafts are visible to their owner only.
"""

__version__ = "0.1.0"
