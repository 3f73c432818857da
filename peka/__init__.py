"""peka: password-protected credential vaults stored as encrypted files."""

__version__ = "0.1.0"
