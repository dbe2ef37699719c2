"""Per-tenant embedding index and KNN search over Redis Stack."""

__version__ = "0.1.0"
