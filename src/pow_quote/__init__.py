"""pow-quote: quotes served behind a hashcash proof-of-work challenge."""

__version__ = "0.1.0"
