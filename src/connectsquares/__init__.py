"""connectsquares — wagered connect-N matches with escrowed payout."""

__version__ = "0.1.0"
