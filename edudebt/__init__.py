"""Education expenditure and external debt dashboard data layer."""

__version__ = "0.1.0"
