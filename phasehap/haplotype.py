"""Haplotypes: allele vectors tagged with a per-locus type."""

from __future__ import annotations

import math
from functools import total_ordering
from typing import Iterable, Optional, Sequence


@total_ordering
class Haplotype:
    """A sequence of alleles, one per locus.

    ``locus_type`` holds one character per locus: ``'S'`` for a SNP and
    ``'M'`` for a microsatellite.  Alleles are stored as floats so that
    "fuzzy" (fractional) alleles can be represented; :meth:`get_allele`
    rounds them to the nearest integer.

    Equality, ordering and hashing depend on the alleles only.  A haplotype
    used as a dictionary key must not be changed afterwards.
    """

    __slots__ = ("locus_type", "alleles")

    def __init__(self, locus_type: str = "", alleles: Optional[Iterable[float]] = None):
        self.locus_type = str(locus_type)
        if alleles is None:
            self.alleles = [0.0] * len(self.locus_type)
        else:
            self.alleles = [float(a) for a in alleles]
            if len(self.alleles) != len(self.locus_type):
                raise ValueError(
                    f"{len(self.alleles)} alleles given for "
                    f"{len(self.locus_type)} loci"
                )

    def section(self, first: int, last: int) -> "Haplotype":
        """Return the haplotype at loci ``first`` up to, not including, ``last``."""
        if not 0 <= first <= last <= self.nloci():
            raise IndexError(f"section [{first}, {last}) outside 0..{self.nloci()}")
        return Haplotype(self.locus_type[first:last], self.alleles[first:last])

    def concat(self, other: "Haplotype") -> "Haplotype":
        """Return this haplotype followed by ``other``."""
        return Haplotype(self.locus_type + other.locus_type, self.alleles + other.alleles)

    def set_allele(self, locus: int, allele: float) -> None:
        self.alleles[locus] = float(allele)

    def get_allele(self, locus: int) -> int:
        """The allele at ``locus``, rounded to the nearest integer."""
        return int(math.floor(self.alleles[locus] + 0.5))

    def get_fuzzy_allele(self, locus: int) -> float:
        """The stored, possibly fractional, allele at ``locus``."""
        return self.alleles[locus]

    def matches(self, other: "Haplotype", uselist: Iterable[int]) -> bool:
        """Whether the two haplotypes agree at every locus in ``uselist``."""
        return all(self.alleles[u] == other.alleles[u] for u in uselist)

    def nloci(self) -> int:
        return len(self.locus_type)

    def printed_len(self) -> int:
        """Number of characters the haplotype takes when printed."""
        return sum(1 if kind == "S" else 3 for kind in self.locus_type)

    def format(self, coding: Sequence[Sequence[int]]) -> str:
        """Render the haplotype using ``coding``.

        For a SNP locus, ``coding[allele][locus]`` is the character code
        printed.  For a microsatellite locus, the allele minus
        ``coding[0][locus]`` is printed, followed by a space.
        """
        parts = []
        for locus, kind in enumerate(self.locus_type):
            allele = self.get_allele(locus)
            if kind == "M":
                if locus > 0 and self.locus_type[locus - 1] == "S":
                    parts.append(" ")
                parts.append(f"{allele - coding[0][locus]} ")
            else:
                parts.append(chr(coding[allele][locus]))
        return "".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Haplotype):
            return NotImplemented
        return self.alleles == other.alleles

    def __lt__(self, other: "Haplotype") -> bool:
        if not isinstance(other, Haplotype):
            return NotImplemented
        return self.alleles < other.alleles

    def __hash__(self) -> int:
        return hash(tuple(self.alleles))

    def __len__(self) -> int:
        return len(self.locus_type)

    def __repr__(self) -> str:
        return f"Haplotype({self.locus_type!r}, {self.alleles!r})"


def n_diff(h1: Haplotype, h2: Haplotype) -> int:
    """Number of loci at which the rounded alleles of two haplotypes differ."""
    return sum(h1.get_allele(locus) != h2.get_allele(locus) for locus in range(h1.nloci()))