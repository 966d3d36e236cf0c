#!/usr/bin/env python3
"""
Customer range - find the customers within reach of a reference point.

This package parses loosely formatted customer files, measures ellipsoidal
distances from a reference point and lists the customers within range.
"""
import importlib.metadata

__version__ = importlib.metadata.version("customer-range")

# Import main classes for public API
from .geometry import GeoPoint, Ellipsoid, DistanceMethod, distance, WGS84
from .customer import CustomerRecord, WarningKind, WarningLog, WarningMessages
from .config import CustomerRangeConfig
from .parser import ParseSession, ProcessResult, process

__all__ = [
    "GeoPoint",
    "Ellipsoid",
    "DistanceMethod",
    "distance",
    "WGS84",
    "CustomerRecord",
    "WarningKind",
    "WarningLog",
    "WarningMessages",
    "CustomerRangeConfig",
    "ParseSession",
    "ProcessResult",
    "process",
]
