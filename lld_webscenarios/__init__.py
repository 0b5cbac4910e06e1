"""Web scenario and trigger provisioning for Zabbix low level discovery items."""

__version__ = "0.3.0"

__all__ = ["__version__"]
