"""Distributions over pairs of haplotypes, used to summarise phase results."""

from __future__ import annotations

import math
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from .constants import KMAX
from .haplotype import Haplotype
from .summary import HapPair, Summary

FlipErrAllele = Tuple[List[float], List[List[float]], List[List[List[float]]]]


def _log(x: float) -> float:
    return -math.inf if x == 0 else math.log(x)


class HapPairList:
    """A map from pairs of haplotypes to (unnormalised) probabilities.

    Pairs are visited in sorted order, which decides ties between
    equally probable pairs.
    """

    def __init__(self) -> None:
        self._probs: Dict[HapPair, float] = {}

    @classmethod
    def from_index(
        cls,
        index: Iterable[HapPair],
        phaseprobs: Sequence[float],
        startlocus: int = -1,
        endlocus: int = -1,
    ) -> "HapPairList":
        """Build a list from candidate pairs and their phase probabilities.

        Each pair is cut down to loci ``startlocus`` up to ``endlocus``.  A
        negative ``startlocus`` means loci 0 up to ``len(phaseprobs)``.
        """
        if startlocus < 0:
            startlocus = 0
            endlocus = len(phaseprobs)
        result = cls()
        for (hap1, hap2), prob in zip(index, phaseprobs):
            result.add(
                (hap1.section(startlocus, endlocus), hap2.section(startlocus, endlocus)),
                prob,
            )
        return result

    def section(self, first: int, last: int) -> "HapPairList":
        """The list with every pair cut down to loci ``first`` up to ``last``."""
        result = HapPairList()
        for (hap1, hap2), prob in self._sorted():
            result.add((hap1.section(first, last), hap2.section(first, last)), prob)
        return result

    def add(self, pair: HapPair, prob: float) -> None:
        """Add ``prob`` to the probability of ``pair``, kept in the order given."""
        key = (pair[0], pair[1])
        self._probs[key] = self._probs.get(key, 0.0) + prob

    def _sorted(self) -> List[Tuple[HapPair, float]]:
        return sorted(self._probs.items(), key=lambda item: item[0])

    def __len__(self) -> int:
        return len(self._probs)

    def __iter__(self) -> Iterator[HapPair]:
        return (pair for pair, _ in self._sorted())

    def __getitem__(self, pair: HapPair) -> float:
        return self._probs[(pair[0], pair[1])]

    def nloci(self) -> int:
        """Number of loci of the haplotypes in the list."""
        if not self._probs:
            raise ValueError("empty pair list has no loci")
        return self._sorted()[0][0][0].nloci()

    def best_pair(self) -> Tuple[HapPair, float]:
        """The most probable pair and its share of the total probability."""
        items = self._sorted()
        if not items:
            raise ValueError("empty pair list has no best pair")
        bestpair = items[0][0]
        bestprob = 0.0
        total = 0.0
        for pair, prob in items:
            total += prob
            if prob > bestprob:
                bestprob = prob
                bestpair = pair
        return bestpair, bestprob / total

    def best_kl_divergence(self, nmissing: Sequence[int]) -> float:
        """Integral of p log q, with q built around the best pair."""
        bestpair, _ = self.best_pair()
        flipprob, errprob, alleleprob = self.compute_flip_err_allele_probs(bestpair, nmissing)
        return self.kl_divergence(bestpair, flipprob, errprob, alleleprob, nmissing)

    def kl_divergence(
        self,
        guesspair: HapPair,
        flipprob: Sequence[float],
        errprob: Sequence[Sequence[float]],
        alleleprob: Sequence[Sequence[Sequence[float]]],
        nmissing: Sequence[int],
    ) -> float:
        """Integral of p log q from the list's distribution to the given q."""
        return sum(
            prob * _log(match_prob(guesspair, pair, flipprob, errprob, alleleprob, nmissing))
            for pair, prob in self._sorted()
        )

    def compute_flip_err_allele_probs(
        self, guesspair: HapPair, nmissing: Sequence[int]
    ) -> FlipErrAllele:
        """Flip, error and replacement-allele probabilities relative to ``guesspair``."""
        nloci = self.nloci()
        flipprob = [0.0] * nloci
        errprob = [[0.0, 0.0] for _ in range(nloci)]
        alleleprob = [[[0.0] * KMAX for _ in range(2)] for _ in range(nloci)]

        for pair, prob in self._sorted():
            flipvec, errvec, allelevec = best_flip_err_allele(pair, guesspair, nmissing)
            for locus in range(nloci):
                flipprob[locus] += prob * flipvec[locus]
                for chrom in range(2):
                    errprob[locus][chrom] += prob * errvec[locus][chrom]
                    alleleprob[locus][chrom][allelevec[locus][chrom]] += (
                        prob * errvec[locus][chrom]
                    )

        for locus_probs in alleleprob:
            for chrom_probs in locus_probs:
                total = sum(chrom_probs)
                if total:
                    chrom_probs[:] = [p / total for p in chrom_probs]

        return flipprob, errprob, alleleprob

    def kl_split_divergence(self, splitlocus: int, nmissing: Sequence[int]) -> float:
        """Integral of p log q when the loci are summarised in two halves."""
        nloci = self.nloci()
        lhs = self.section(0, splitlocus)
        rhs = self.section(splitlocus, nloci)
        guess1, _ = lhs.best_pair()
        guess2, _ = rhs.best_pair()
        nmissing1 = list(nmissing[:splitlocus])
        nmissing2 = list(nmissing[splitlocus:])
        flip1, err1, allele1 = lhs.compute_flip_err_allele_probs(guess1, nmissing1)
        flip2, err2, allele2 = rhs.compute_flip_err_allele_probs(guess2, nmissing2)
        # Two heterozygous halves may be joined either way round: a factor 0.5 in q.
        return (
            math.log(0.5) * is_heterozygous(guess1) * is_heterozygous(guess2)
            + lhs.kl_divergence(guess1, flip1, err1, allele1, nmissing1)
            + rhs.kl_divergence(guess2, flip2, err2, allele2, nmissing2)
        )

    def summarise(self, nmissing: Sequence[int], allowsplit: bool = True) -> Summary:
        """Summarise the list, splitting it where that fits the distribution better."""
        bestsplitlocus = 0
        if allowsplit:
            bestkl = self.best_kl_divergence(nmissing)
            for locus in range(1, self.nloci()):
                klsplit = self.kl_split_divergence(locus, nmissing)
                if klsplit > bestkl:
                    bestkl = klsplit
                    bestsplitlocus = locus

        if bestsplitlocus > 0 and allowsplit:
            left = self.summarise_range(0, bestsplitlocus, nmissing)
            right = self.summarise_range(bestsplitlocus, self.nloci(), nmissing)
            return left.merge(right)

        bestguess, _ = self.best_pair()
        flipprob, errprob, alleleprob = self.compute_flip_err_allele_probs(bestguess, nmissing)
        return Summary.single(bestguess, flipprob, errprob, alleleprob)

    def summarise_range(
        self,
        startlocus: int,
        endlocus: int,
        nmissing: Sequence[int],
        allowsplit: bool = True,
    ) -> Summary:
        """Summarise loci ``startlocus`` up to ``endlocus`` only."""
        partial = self.section(startlocus, endlocus)
        return partial.summarise(list(nmissing[startlocus:endlocus]), allowsplit)

    def __repr__(self) -> str:
        return f"HapPairList({len(self._probs)} pairs)"


def best_flip_err_allele(
    truepair: HapPair, guesspair: HapPair, nmissing: Sequence[int]
) -> Tuple[List[int], List[List[int]], List[List[int]]]:
    """The fewest flips and errors that turn ``guesspair`` into ``truepair``.

    Returns per-locus flip indicators, per-locus, per-chromosome error
    indicators and the alleles that replace the erroneous ones.
    """
    nloci = truepair[0].nloci()
    f0 = [0] * nloci
    f1 = [0] * nloci
    e0 = [[0, 0] for _ in range(nloci)]
    e1 = [[0, 0] for _ in range(nloci)]
    new0 = [[0, 0] for _ in range(nloci)]
    new1 = [[0, 0] for _ in range(nloci)]
    sum0 = 0
    sum1 = 0

    for i in range(nloci):
        t1 = truepair[0].get_allele(i)
        t2 = truepair[1].get_allele(i)
        g1 = guesspair[0].get_allele(i)
        g2 = guesspair[1].get_allele(i)
        if nmissing[i] == 0:
            if t1 != g1 and t2 != g2 and t1 == g2 and t2 == g1:
                f0[i] = 1
                sum0 += 1
            elif t1 != g2 and t2 != g1 and t1 == g1 and t2 == g2:
                f1[i] = 1
                sum1 += 1
        else:
            if t1 != g1:
                e0[i][0] += 1
                sum0 += 1
                new0[i][0] = t1
            if t2 != g2:
                e0[i][1] += 1
                sum0 += 1
                new0[i][1] = t2
            if t1 != g2:
                e1[i][1] += 1
                sum1 += 1
                new1[i][1] = t1
            if t2 != g1:
                e1[i][0] += 1
                sum1 += 1
                new1[i][0] = t2

    if sum0 < sum1:
        return f0, e0, new0
    return f1, e1, new1


def match_prob(
    truepair: HapPair,
    guesspair: HapPair,
    flipprob: Sequence[float],
    errprob: Sequence[Sequence[float]],
    alleleprob: Sequence[Sequence[Sequence[float]]],
    nmissing: Sequence[int],
) -> float:
    """Probability of reaching ``truepair`` from ``guesspair`` under the given rates."""
    nloci = truepair[0].nloci()
    p0 = 1.0
    p1 = 1.0
    for i in range(nloci):
        t1 = truepair[0].get_allele(i)
        t2 = truepair[1].get_allele(i)
        g1 = guesspair[0].get_allele(i)
        g2 = guesspair[1].get_allele(i)
        if nmissing[i] == 0:
            if t1 != g1 and t2 != g2 and t1 == g2 and t2 == g1:
                p0 *= flipprob[i]
                p1 *= 1 - flipprob[i]
            elif t1 != g2 and t2 != g1 and t1 == g1 and t2 == g2:
                p0 *= 1 - flipprob[i]
                p1 *= flipprob[i]
        else:
            e0, e1 = errprob[i][0], errprob[i][1]
            a0, a1 = alleleprob[i][0], alleleprob[i][1]
            p0 *= ((1 - e0) * (g1 == t1) + e0 * a0[t1]) * ((1 - e1) * (g2 == t2) + e1 * a1[t2])
            p1 *= ((1 - e0) * (g1 == t2) + e0 * a0[t2]) * ((1 - e1) * (g2 == t1) + e1 * a1[t1])
    if is_heterozygous(guesspair):
        return p0 + p1
    return p0


def is_heterozygous(pair: HapPair) -> bool:
    """Whether the two haplotypes of the pair differ."""
    return pair[0] != pair[1]