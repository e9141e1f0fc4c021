"""Haplotypes, haplotype lists, copying-model probabilities and phase-uncertainty summaries."""

__version__ = "0.1.0"