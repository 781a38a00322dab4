"""YearPeer: goals and daily tasks on a yearly planning calendar."""

__version__ = "0.1.0"
