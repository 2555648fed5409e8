"""Interactive dialog shell for skill simulations."""

__version__ = "0.1.0"
