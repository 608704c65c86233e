"""Engines operating on many alleles at once."""
