"""Typed keys for state shared through the aiohttp application."""

from aiohttp import web

from ..logging import BaseLogger
from ..metrics import MetricsExporter

LOGGER_KEY = web.AppKey("logger", BaseLogger)
METRICS_KEY = web.AppKey("metrics", MetricsExporter)
