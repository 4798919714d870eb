"""Language server for SimplicityHL programs."""

__version__ = "0.1.0"
