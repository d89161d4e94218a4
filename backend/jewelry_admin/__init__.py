"""Admin back-office client for the jewelry storefront."""

__version__ = "0.1.0"
