"""Correlate, render and publish the per-guild VATSIM listing."""

from .correlator import correlate
from .publisher import ListingPublisher
from .renderer import render

__all__ = ["ListingPublisher", "correlate", "render"]
