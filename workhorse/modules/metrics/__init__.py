from .exporter import MetricsExporter, endpoint_pattern

__all__ = ['MetricsExporter', 'endpoint_pattern']
