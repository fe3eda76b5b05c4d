"""Vendor proposal analysis for RFP spaces."""

__version__ = "0.1.0"
