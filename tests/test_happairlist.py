import math

import pytest

from phasehap.constants import KMAX
from phasehap.haplotype import Haplotype
from phasehap.happairlist import (
    HapPairList,
    best_flip_err_allele,
    is_heterozygous,
    match_prob,
)


def hap(*alleles):
    return Haplotype("S" * len(alleles), alleles)


def make(*entries):
    lst = HapPairList()
    for pair, prob in entries:
        lst.add(pair, prob)
    return lst


def test_add_accumulates():
    pair = (hap(0, 1), hap(1, 0))
    lst = make((pair, 0.25), (pair, 0.5))
    assert len(lst) == 1
    assert lst[pair] == pytest.approx(0.25 + 0.5)


def test_add_keeps_pair_order():
    a, b = hap(0), hap(1)
    lst = make(((a, b), 1.0), ((b, a), 2.0))
    assert len(lst) == 2
    assert list(lst) == [(a, b), (b, a)]


def test_best_pair_and_share():
    p1 = (hap(0, 0), hap(1, 1))
    p2 = (hap(0, 1), hap(1, 0))
    lst = make((p1, 1.0), (p2, 3.0))
    best, share = lst.best_pair()
    assert best == p2
    assert share == pytest.approx(3.0 / (1.0 + 3.0))


def test_best_pair_tie_takes_first_sorted():
    p1 = (hap(0, 1), hap(1, 0))
    p2 = (hap(0, 0), hap(1, 1))
    lst = make((p1, 1.0), (p2, 1.0))
    best, _ = lst.best_pair()
    assert best == p2


def test_empty_list_errors():
    lst = HapPairList()
    with pytest.raises(ValueError):
        lst.best_pair()
    with pytest.raises(ValueError):
        lst.nloci()


def test_nloci():
    lst = make(((hap(0, 1, 0), hap(1, 0, 0)), 1.0))
    assert lst.nloci() == 3


def test_section_merges_pairs():
    lst = make(((hap(0, 0), hap(1, 0)), 0.25), ((hap(0, 1), hap(1, 1)), 0.5))
    left = lst.section(0, 1)
    assert len(left) == 1
    assert left[(hap(0), hap(1))] == pytest.approx(0.25 + 0.5)
    assert lst.section(1, 2).nloci() == 1


def test_from_index_with_range():
    index = [(hap(0, 1, 1), hap(1, 0, 1)), (hap(0, 1, 0), hap(1, 0, 0))]
    lst = HapPairList.from_index(index, [0.25, 0.5], 0, 2)
    assert len(lst) == 1
    assert lst[(hap(0, 1), hap(1, 0))] == pytest.approx(0.75)


def test_from_index_default_uses_phaseprob_count():
    index = [(hap(0, 1), hap(1, 0)), (hap(1, 1), hap(0, 0))]
    lst = HapPairList.from_index(index, [0.5, 0.5])
    assert lst.nloci() == 2
    assert len(lst) == 2


def test_is_heterozygous():
    assert is_heterozygous((hap(0, 1), hap(1, 0)))
    assert not is_heterozygous((hap(0, 1), hap(0, 1)))


@pytest.mark.parametrize(
    "true, guess",
    [
        ((hap(0, 0), hap(1, 1)), (hap(0, 0), hap(1, 1))),
        ((hap(0, 0), hap(1, 1)), (hap(1, 1), hap(0, 0))),
    ],
)
def test_best_flip_none_needed(true, guess):
    flip, err, allele = best_flip_err_allele(true, guess, [0, 0])
    assert flip == [0, 0]
    assert err == [[0, 0], [0, 0]]


def test_best_flip_single_switch():
    flip, _, _ = best_flip_err_allele(
        (hap(0, 0), hap(1, 1)), (hap(0, 1), hap(1, 0)), [0, 0]
    )
    assert sum(flip) == 1


def test_best_err_at_missing_locus():
    _, err, allele = best_flip_err_allele((hap(0), hap(0)), (hap(0), hap(1)), [1])
    assert sum(map(sum, err)) == 1
    assert allele == [[0, 0]]


def test_match_prob_identical_het_pair():
    pair = (hap(0, 1), hap(1, 0))
    p = match_prob(pair, pair, [0.0, 0.0], [[0, 0], [0, 0]], None, [0, 0])
    assert p == pytest.approx(1.0)


def test_match_prob_homozygous_only_direct():
    true = (hap(0, 1), hap(1, 0))
    guess = (hap(0, 1), hap(0, 1))
    p = match_prob(true, guess, [0.5, 0.5], [[0, 0], [0, 0]], None, [0, 0])
    assert 0.0 <= p <= 1.0


def test_flip_probs_accumulate_raw_probability():
    p1 = (hap(0, 0), hap(1, 1))
    p2 = (hap(0, 1), hap(1, 0))
    lst = make((p1, 0.75), (p2, 0.25))
    flip, err, allele = lst.compute_flip_err_allele_probs(p1, [0, 0])
    assert sum(flip) == pytest.approx(0.25)
    assert err == [[0.0, 0.0], [0.0, 0.0]]
    assert all(len(chrom) == KMAX for locus in allele for chrom in locus)


def test_allele_probs_normalised():
    lst = make(((hap(0), hap(0)), 0.5), ((hap(1), hap(1)), 0.5))
    _, _, allele = lst.compute_flip_err_allele_probs((hap(0), hap(1)), [1])
    for chrom in allele[0]:
        assert sum(chrom) == pytest.approx(1.0) or sum(chrom) == 0.0


def test_best_kl_divergence_certain_pair_is_zero():
    lst = make(((hap(0, 1), hap(1, 0)), 1.0))
    assert lst.best_kl_divergence([0, 0]) == pytest.approx(0.0)


def test_kl_divergence_not_positive():
    lst = make(((hap(0, 0), hap(1, 1)), 0.5), ((hap(0, 1), hap(1, 0)), 0.5))
    assert lst.best_kl_divergence([0, 0]) <= 0.0


def test_kl_split_divergence_het_halves():
    lst = make(((hap(0, 1), hap(1, 0)), 1.0))
    assert lst.kl_split_divergence(1, [0, 0]) == pytest.approx(math.log(0.5))


def test_summarise_certain_pair():
    pair = (hap(0, 1), hap(1, 0))
    s = make((pair, 1.0)).summarise([0, 0])
    assert s.bestguess == [pair]
    assert s.flipprob == [[0.0, 0.0]]


def test_summarise_uncertain_phase():
    p1 = (hap(0, 0), hap(1, 1))
    p2 = (hap(0, 1), hap(1, 0))
    s = make((p1, 0.5), (p2, 0.5)).summarise([0, 0])
    assert len(s.bestguess) == 1
    assert s.bestguess[0] == p1
    assert sum(s.flipprob[0]) == pytest.approx(0.5)


def test_summarise_without_split():
    p1 = (hap(0, 0), hap(1, 1))
    p2 = (hap(0, 1), hap(1, 0))
    s = make((p1, 0.5), (p2, 0.5)).summarise([0, 0], False)
    assert len(s.bestguess) == 1


def test_summarise_range():
    lst = make(((hap(0, 1, 1), hap(1, 0, 0)), 1.0))
    s = lst.summarise_range(1, 3, [0, 0, 0])
    total_loci = sum(pair[0].nloci() for pair in s.bestguess)
    assert total_loci == 2
    joined = s.bestguess[0][0]
    for pair in s.bestguess[1:]:
        joined = joined.concat(pair[0])
    assert joined == hap(1, 1) or joined == hap(0, 0)