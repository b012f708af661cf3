"""
Error taxonomy for the report pipeline
"""


class UptimeReportError(Exception):
    """Base class for all report pipeline errors"""
    pass


class QueryError(UptimeReportError):
    """Status store unreachable or returned a malformed response"""
    pass


class RegistryError(UptimeReportError):
    """Known entity list is unavailable"""
    pass


class DeliveryError(UptimeReportError):
    """A report sink failed to accept the report"""
    pass


class ConfigError(UptimeReportError):
    """Invalid configuration, detected before the worker starts"""
    pass
