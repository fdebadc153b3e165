"""relgraph — capped relationship graphs between accounts."""

__version__ = "0.1.0"
