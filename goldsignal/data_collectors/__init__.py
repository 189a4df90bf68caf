"""Adapters for price, news and economic data sources."""
