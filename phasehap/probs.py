"""Probabilities of a haplotype given a haplotype list.

The list supplies the haplotypes a new haplotype may copy, weighted by
their frequencies.  Mutation is described by ``hit_prob``, a callable
``hit_prob(locus, t, from_allele, target)`` returning the probability that
copying ``from_allele`` at ``locus`` yields ``target``.  With quadrature
``t`` is the index of the quadrature point; without it ``t`` is ``None``
and the callable is expected to use its own per-locus mutation rate.
For fuzzy copying ``from_allele`` is the stored, possibly fractional,
allele.

Copying states are laid out haplotype by haplotype: with quadrature state
``j * SS + t`` copies positive haplotype ``j`` at time point ``t``;
without it state ``j`` copies positive haplotype ``j``.
"""

from __future__ import annotations

import copy
import math
import random
from typing import Callable, List, Optional, Sequence, Tuple

from .constants import SS, WEIGHTS
from .haplist import HapList
from .haplotype import Haplotype, n_diff

HitProb = Callable[[int, Optional[int], float, int], float]
Correction = Callable[[float], float]

EM_DPRIOR = 0.001  # prior added to each frequency when one haplotype is scored
EM_LIST_DPRIOR = 1.0 / 20  # prior added when the whole list is scored


def em_prob(haplist: HapList, hap: Haplotype, dprior: float = EM_DPRIOR) -> float:
    """Frequency of ``hap`` in the list plus ``dprior``."""
    if hap in haplist:
        return haplist[hap].freq + dprior
    return dprior


def compute_em_probs(haplist: HapList) -> None:
    """Set every record's probability to its frequency plus a fixed prior."""
    for hap in haplist:
        record = haplist[hap]
        record.prob = record.freq + EM_LIST_DPRIOR


def snp_sd_prob(haplist: HapList, hap: Haplotype, diffprobs: Sequence[float]) -> float:
    """Copying probability of ``hap`` when every locus is a SNP.

    ``diffprobs[d]`` is the probability of a copy differing at ``d`` loci.
    """
    if not haplist.positive_haps:
        return 1.0
    return sum(record.freq * diffprobs[n_diff(hap, other)] for other, record in haplist.positive_haps)


def sd_prob(haplist: HapList, hap: Haplotype, hit_prob: HitProb) -> float:
    """Copying probability of ``hap`` without recombination, summed over time points."""
    if not haplist.positive_haps:
        return 1.0
    total = 0.0
    for other, record in haplist.positive_haps:
        indprob = 0.0
        for t in range(SS):
            term = 1.0
            for locus in range(hap.nloci()):
                term *= hit_prob(locus, t, other.get_allele(locus), hap.get_allele(locus))
            indprob += WEIGHTS[t] * term
        total += record.freq * indprob
    return total


def _check_inputs(
    hap: Haplotype, nchr: int, rho: Sequence[float], missing: Optional[Sequence[int]]
) -> List[int]:
    nloci = hap.nloci()
    if nloci == 0:
        raise ValueError("haplotype has no loci")
    if nchr == 0:
        raise ValueError("number of chromosomes must not be zero")
    if len(rho) < nloci - 1:
        raise ValueError(f"{len(rho)} recombination rates given for {nloci} loci")
    if missing is None:
        return [0] * nloci
    missing = list(missing)
    if len(missing) != nloci:
        raise ValueError(f"{len(missing)} missing flags given for {nloci} loci")
    return missing


def _priors(haplist: HapList, nchr: int, usequad: bool) -> List[Tuple[Haplotype, Optional[int], float]]:
    states = []
    for other, record in haplist.positive_haps:
        if usequad:
            states.extend((other, t, record.freq / nchr * WEIGHTS[t]) for t in range(SS))
        else:
            states.append((other, None, record.freq / nchr))
    return states


def _trans_probs(
    rho: Sequence[float], nchr: int, nloci: int, correction: Optional[Correction]
) -> List[float]:
    probs = []
    for r in rho[: nloci - 1]:
        factor = 1.0 if correction is None else correction(r)
        probs.append(1 - math.exp(-(factor * r / nchr)))
    return probs


def forwards_algorithm(
    haplist: HapList,
    hap: Haplotype,
    nchr: int,
    rho: Sequence[float],
    hit_prob: HitProb,
    missing: Optional[Sequence[int]] = None,
    from_rhs: bool = False,
    usequad: bool = True,
    fuzzy: bool = False,
    correction: Optional[Correction] = None,
) -> Tuple[float, List[List[float]], List[float]]:
    """Run the copying model along ``hap``.

    ``alpha[r][j]`` is the probability of the observed alleles up to locus
    ``r`` (from the left, or from the right with ``from_rhs``) with copying
    state ``j`` at locus ``r``.  Loci flagged in ``missing`` contribute no
    emission.  ``rho[i]`` is the recombination rate between loci ``i`` and
    ``i + 1``, scaled by ``correction(rho[i])`` when a correction is given.

    Returns the total probability (the sum of ``alpha`` at the last locus
    visited), ``alpha`` and the per-locus sums of ``alpha``.
    """
    missing = _check_inputs(hap, nchr, rho, missing)
    nloci = hap.nloci()
    trans = _trans_probs(rho, nchr, nloci, correction)
    states = _priors(haplist, nchr, usequad)

    def emit(locus: int, other: Haplotype, t: Optional[int]) -> float:
        if missing[locus] != 0:
            return 1.0
        source = other.get_fuzzy_allele(locus) if fuzzy else other.get_allele(locus)
        return hit_prob(locus, t, source, hap.get_allele(locus))

    order = list(range(nloci - 1, -1, -1)) if from_rhs else list(range(nloci))
    alpha: List[List[float]] = [[] for _ in range(nloci)]
    alpha_sum = [0.0] * nloci

    first = order[0]
    alpha[first] = [prior * emit(first, other, t) for other, t, prior in states]
    alpha_sum[first] = sum(alpha[first])

    previous = first
    for locus in order[1:]:
        tprob = trans[locus] if from_rhs else trans[previous]
        prev_sum = alpha_sum[previous]
        alpha[locus] = [
            (old * (1 - tprob) + prev_sum * tprob * prior) * emit(locus, other, t)
            for old, (other, t, prior) in zip(alpha[previous], states)
        ]
        alpha_sum[locus] = sum(alpha[locus])
        previous = locus

    return alpha_sum[previous], alpha, alpha_sum


def _draw(weights: Sequence[float], rng) -> int:
    return rng.choices(range(len(weights)), weights=weights)[0]


def backwards_algorithm(
    haplist: HapList,
    hap: Haplotype,
    nchr: int,
    rho: Sequence[float],
    alpha: Sequence[Sequence[float]],
    alpha_sum: Sequence[float],
    usequad: bool = True,
    rng: Optional[random.Random] = None,
) -> Tuple[List[int], List[int], List[int]]:
    """Sample, from right to left, the haplotype copied by ``hap``.

    ``alpha`` and ``alpha_sum`` come from a left-to-right run of
    :func:`forwards_algorithm`; they are not modified.  Returns, per locus,
    the sampled time point, the copied allele and the position of the
    copied haplotype among the positive haplotypes.  Without quadrature
    every time point is 0.
    """
    nloci = hap.nloci()
    if nloci == 0:
        raise ValueError("haplotype has no loci")
    if nchr == 0:
        raise ValueError("number of chromosomes must not be zero")
    if len(rho) < nloci - 1:
        raise ValueError(f"{len(rho)} recombination rates given for {nloci} loci")
    rng = rng or random.Random()
    per = SS if usequad else 1
    trans = [1 - math.exp(-(r / nchr)) for r in rho[: nloci - 1]]
    priors = [prior for _, _, prior in _priors(haplist, nchr, usequad)]
    positive = haplist.positive_haps

    alpha = copy.deepcopy([list(row) for row in alpha])
    alpha_sum = list(alpha_sum)
    times = [0] * nloci
    alleles = [0] * nloci
    haps = [0] * nloci

    for locus in range(nloci - 1, 0, -1):
        copied = _draw(alpha[locus], rng)
        haps[locus] = copied // per
        alleles[locus] = positive[copied // per][0].get_allele(locus)
        times[locus] = copied % per

        tprob = trans[locus - 1]
        row = alpha[locus - 1]
        for ptr, prior in enumerate(priors):
            step = tprob * prior
            if ptr == copied:
                step += 1 - tprob
            row[ptr] = (row[ptr] / alpha_sum[locus]) * step
        alpha_sum[locus - 1] = sum(row)

    copied = _draw(alpha[0], rng)
    haps[0] = copied // per
    alleles[0] = positive[copied // per][0].get_allele(0)
    times[0] = copied % per
    return times, alleles, haps


def hidden_state_probs(
    haplist: HapList,
    hap: Haplotype,
    nchr: int,
    rho: Sequence[float],
    hit_prob: HitProb,
    missing: Optional[Sequence[int]] = None,
    usequad: bool = True,
) -> List[List[float]]:
    """Probability that ``hap`` copied each allele (and time point) at each locus.

    Entry ``[locus][allele * SS + t]`` (or ``[locus][allele]`` without
    quadrature) is the posterior probability of copying ``allele`` at time
    point ``t``.  Every row has room for alleles up to the largest allele
    held by a positive haplotype.
    """
    missing = _check_inputs(hap, nchr, rho, missing)
    nloci = hap.nloci()
    per = SS if usequad else 1
    _, alpha, _ = forwards_algorithm(haplist, hap, nchr, rho, hit_prob, missing, False, usequad)
    _, beta, _ = forwards_algorithm(haplist, hap, nchr, rho, hit_prob, missing, True, usequad)
    states = _priors(haplist, nchr, usequad)

    nalleles = 0
    for other, _ in haplist.positive_haps:
        for locus in range(nloci):
            nalleles = max(nalleles, other.get_allele(locus) + 1)
    copy_prob = [[0.0] * (nalleles * per) for _ in range(nloci)]

    for locus in range(nloci):
        products = []
        for a, b, (other, t, _) in zip(alpha[locus], beta[locus], states):
            emission = 1.0
            if missing[locus] == 0:
                emission = hit_prob(locus, t, other.get_allele(locus), hap.get_allele(locus))
            products.append(a * b / (emission * emission))
        total = sum(products)
        for value, (other, t, _) in zip(products, states):
            slot = other.get_allele(locus) * per + (t or 0)
            copy_prob[locus][slot] += value / total
    return copy_prob


def fdls_prob(
    haplist: HapList,
    hap: Haplotype,
    nchr: int,
    rho: Sequence[float],
    hit_prob: HitProb,
    missing: Optional[Sequence[int]] = None,
    usequad: bool = True,
    fuzzy: bool = False,
    correction: Optional[Correction] = None,
) -> float:
    """Probability of ``hap`` under the copying model with recombination.

    With no chromosomes to copy the probability is 1.
    """
    if nchr == 0:
        return 1.0
    prob, _, _ = forwards_algorithm(
        haplist, hap, nchr, rho, hit_prob, missing, False, usequad, fuzzy, correction
    )
    return prob