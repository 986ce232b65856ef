"""Client-side data layer for a CoinAPI-backed crypto metadata viewer."""

__version__ = "0.1.0"
