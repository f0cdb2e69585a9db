"""
BurnBox

Self-destructing file sharing: burn records, quota policy and the
lifecycle service that retires them.
"""

__version__ = "1.0.0"
