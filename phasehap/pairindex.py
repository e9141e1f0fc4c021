"""Candidate haplotype pairs per individual: pruning, best guesses and summaries.

An index holds, for each individual, the list of haplotype pairs that can
make up its genotype.  ``phaseprobs`` holds, for each individual, one
probability per pair in the same order.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .happairlist import HapPairList
from .summary import HapPair, Summary

PairIndex = Sequence[Sequence[HapPair]]
PhaseProbs = Sequence[Sequence[float]]


def prune_pairs_index(
    index: PairIndex, phaseprobs: PhaseProbs, minthreshold: float
) -> Tuple[List[List[HapPair]], List[List[float]]]:
    """Drop the pairs whose phase probability is not above ``minthreshold``.

    The phase probabilities of the pairs kept are reset to zero.  When an
    individual would lose every pair, all of its pairs are kept instead
    (again with zero probabilities).  Returns the new index and the new
    phase probabilities.
    """
    if len(index) != len(phaseprobs):
        raise ValueError("index and phaseprobs cover different numbers of individuals")
    new_index: List[List[HapPair]] = []
    new_probs: List[List[float]] = []
    for pairs, probs in zip(index, phaseprobs):
        kept = [pair for pair, prob in zip(pairs, probs) if prob > minthreshold]
        if not kept:
            kept = list(pairs)
        new_index.append(kept)
        new_probs.append([0.0] * len(kept))
    return new_index, new_probs


def find_best_pair(
    index: Sequence[HapPair],
    phaseprobs: Sequence[float],
    startlocus: int = -1,
    endlocus: int = -1,
) -> Tuple[HapPair, float]:
    """The pair of one individual with the highest phase probability.

    With a negative ``startlocus`` all loci count, and the pair returned is
    the one with the largest probability.  Otherwise the pairs are cut down
    to loci ``startlocus`` up to ``endlocus``, probabilities of pairs that
    become equal are pooled, and the first pair of the index that gives the
    best cut-down pair (in either order) is returned.  The probability
    returned is the best pair's share of the total.
    """
    if not index:
        raise ValueError("no candidate pairs to choose from")

    if startlocus < 0:
        bestpair = index[0]
        bestprob = 0.0
        total = 0.0
        for pair, prob in zip(index, phaseprobs):
            total += prob
            if prob > bestprob:
                bestprob = prob
                bestpair = pair
        share = bestprob / total if total else math.nan
        return bestpair, share

    pairprobs = HapPairList()
    for (hap1, hap2), prob in zip(index, phaseprobs):
        pairprobs.add(
            (hap1.section(startlocus, endlocus), hap2.section(startlocus, endlocus)), prob
        )
    (best1, best2), share = pairprobs.best_pair()

    for pair in index:
        cut1 = pair[0].section(startlocus, endlocus)
        cut2 = pair[1].section(startlocus, endlocus)
        if (cut1 == best1 and cut2 == best2) or (cut2 == best1 and cut1 == best2):
            return pair, share
    raise ValueError("best section pair not found among the candidates")


def produce_summary(
    index: PairIndex,
    phaseprobs: PhaseProbs,
    startlocus: int,
    endlocus: int,
    nmissing: Sequence[Sequence[int]],
    allowsplit: bool = True,
) -> List[Summary]:
    """Summarise each individual over loci ``startlocus`` up to ``endlocus``.

    ``nmissing[ind]`` gives, per locus, the number of missing alleles of
    individual ``ind``.  Each individual is summarised as a single segment
    around its best pair; ``allowsplit`` does not lead to the range being
    divided.
    """
    if not (len(index) == len(phaseprobs) == len(nmissing)):
        raise ValueError("index, phaseprobs and nmissing cover different individuals")
    summaries: List[Summary] = []
    for pairs, probs, missing in zip(index, phaseprobs, nmissing):
        possible = HapPairList.from_index(pairs, probs, startlocus, endlocus)
        summaries.append(possible.summarise(missing, False))
    return summaries