"""Summaries of the distribution of haplotype pairs for one individual."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .haplotype import Haplotype

HapPair = Tuple[Haplotype, Haplotype]


@dataclass
class Summary:
    """An individual summarised as a run of independent segments.

    Each segment has a best-guess pair of haplotypes, a per-locus
    probability that the phase is flipped, a per-locus, per-chromosome
    error probability and a per-locus, per-chromosome distribution over
    replacement alleles.
    """

    bestguess: List[HapPair] = field(default_factory=list)
    flipprob: List[List[float]] = field(default_factory=list)
    errorprob: List[List[List[float]]] = field(default_factory=list)
    alleleprob: List[List[List[List[float]]]] = field(default_factory=list)

    @classmethod
    def single(
        cls,
        pair: HapPair,
        flipprob: Sequence[float],
        errorprob: Sequence[Sequence[float]],
        alleleprob: Sequence[Sequence[Sequence[float]]],
    ) -> "Summary":
        """A summary made of one segment."""
        return cls(
            bestguess=[(pair[0], pair[1])],
            flipprob=[list(flipprob)],
            errorprob=[[list(row) for row in errorprob]],
            alleleprob=[[[list(chrom) for chrom in locus] for locus in alleleprob]],
        )

    def merge(self, other: "Summary") -> "Summary":
        """A summary holding the segments of this one followed by those of ``other``."""
        return Summary(
            bestguess=self.bestguess + other.bestguess,
            flipprob=self.flipprob + other.flipprob,
            errorprob=self.errorprob + other.errorprob,
            alleleprob=self.alleleprob + other.alleleprob,
        )

    def format(self, coding: Sequence[Sequence[int]]) -> str:
        """Render the summary as five lines of text, segments separated by ``||``."""
        lines = []
        for side in (0, 1):
            parts = []
            start = 0
            for pair in self.bestguess:
                hap = pair[side]
                shifted = [row[start:] for row in coding]
                parts.append(hap.format(shifted) + " || ")
                start += hap.nloci()
            lines.append("".join(parts))
        lines.append(
            "".join("".join(f"{p:.2f};" for p in seg) + " || " for seg in self.flipprob)
        )
        for chrom in (0, 1):
            lines.append(
                "".join(
                    "".join(f"{p[chrom]:.2f}:" for p in seg) + " || "
                    for seg in self.errorprob
                )
            )
        return "\n".join(lines) + "\n"