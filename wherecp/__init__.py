"""wherecp - find the firewall rules that match a query."""

__version__ = "0.1.0"
