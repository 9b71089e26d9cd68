"""
Neural Landscape
================
Simulation and projection core for an interactively navigable 3D view
of synthetic node telemetry and transaction packets.
"""

__version__ = "0.1.0"
__author__ = "Neural Landscape Development Team"
