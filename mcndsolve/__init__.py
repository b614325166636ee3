"""Branch-and-bound solver for multicommodity capacitated fixed-charge network design."""

__version__ = "0.1.0"