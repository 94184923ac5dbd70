"""
Plotting module.

Implements:
- Discrete spectrum plots with matplotlib
"""

from .spectrum import plot_discrete_spectrum

__all__ = ["plot_discrete_spectrum"]
