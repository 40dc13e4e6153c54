"""branchflow: visual design of product action workflows kept in sync with a remote store."""

__version__ = "0.1.0"
