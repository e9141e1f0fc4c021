import math

import pytest

from phasehap.happairlist import HapPairList
from phasehap.haplotype import Haplotype
from phasehap.pairindex import find_best_pair, produce_summary, prune_pairs_index


def hap(*alleles):
    return Haplotype("S" * len(alleles), alleles)


A = hap(0, 0, 0)
B = hap(1, 1, 1)
C = hap(0, 1, 0)
D = hap(1, 0, 1)
A2 = hap(0, 0, 1)
B2 = hap(1, 1, 0)


def test_prune_keeps_pairs_above_threshold_and_resets_probs():
    index = [[(A, B), (C, D)], [(A, C)]]
    probs = [[0.9, 0.1], [0.7]]
    new_index, new_probs = prune_pairs_index(index, probs, 0.5)
    assert new_index == [[(A, B)], [(A, C)]]
    assert new_probs == [[0.0], [0.0]]


def test_prune_reinstates_all_when_everything_pruned():
    index = [[(A, B), (C, D)]]
    probs = [[0.5, 0.5]]
    new_index, new_probs = prune_pairs_index(index, probs, 0.5)
    assert new_index == [[(A, B), (C, D)]]
    assert new_probs == [[0.0, 0.0]]


def test_prune_rejects_mismatched_lengths():
    with pytest.raises(ValueError):
        prune_pairs_index([[(A, B)]], [], 0.1)


def test_find_best_pair_whole_range():
    index = [(A, B), (C, D), (A2, B2)]
    pair, share = find_best_pair(index, [0.2, 0.6, 0.2])
    assert pair == (C, D)
    assert share == pytest.approx(0.6)


def test_find_best_pair_share_is_normalised():
    index = [(A, B), (C, D)]
    _, share = find_best_pair(index, [2.0, 6.0])
    assert share == pytest.approx(6.0 / 8.0)


def test_find_best_pair_first_pair_on_ties():
    index = [(A, B), (C, D)]
    pair, _ = find_best_pair(index, [0.5, 0.5])
    assert pair == (A, B)


def test_find_best_pair_zero_total_gives_nan():
    pair, share = find_best_pair([(A, B)], [0.0])
    assert pair == (A, B)
    assert math.isnan(share)


def test_find_best_pair_range_pools_equal_sections():
    # (A, B) and (A2, B2) agree on loci 0..2, so their probabilities pool.
    index = [(A, B), (C, D), (A2, B2)]
    pair, share = find_best_pair(index, [0.3, 0.4, 0.3], 0, 2)
    assert pair == (A, B)
    assert share == pytest.approx(0.6)


def test_find_best_pair_range_full_matches_whole():
    index = [(A, B), (C, D)]
    probs = [0.25, 0.75]
    assert find_best_pair(index, probs, 0, 3)[0] == find_best_pair(index, probs)[0]


def test_find_best_pair_empty_raises():
    with pytest.raises(ValueError):
        find_best_pair([], [])


def test_produce_summary_single_certain_pair():
    index = [[(A, B)]]
    probs = [[1.0]]
    summaries = produce_summary(index, probs, 0, 3, [[0, 0, 0]])
    assert len(summaries) == 1
    summary = summaries[0]
    assert summary.bestguess == [(A, B)]
    assert summary.flipprob == [[0.0, 0.0, 0.0]]
    assert summary.errorprob == [[[0.0, 0.0]] * 3]


def test_produce_summary_is_one_segment_per_individual():
    index = [[(A, B), (C, D)], [(A, C), (B, D)]]
    probs = [[0.6, 0.4], [0.1, 0.9]]
    summaries = produce_summary(index, probs, 0, 3, [[0, 0, 0], [0, 0, 0]], True)
    assert len(summaries) == 2
    assert all(len(s.bestguess) == 1 for s in summaries)
    assert summaries[0].bestguess[0] == (A, B)
    assert summaries[1].bestguess[0] == (B, D)


def test_produce_summary_range_cuts_haplotypes():
    index = [[(A, B)]]
    summaries = produce_summary(index, [[1.0]], 1, 3, [[0, 0, 0]])
    first, second = summaries[0].bestguess[0]
    assert first.nloci() == 2
    assert second.nloci() == 2
    assert first == A.section(1, 3)


def test_produce_summary_agrees_with_pair_list():
    index = [[(A, B), (C, D), (A2, B2)]]
    probs = [[0.5, 0.3, 0.2]]
    nmissing = [[0, 0, 0]]
    summary = produce_summary(index, probs, 0, 3, nmissing)[0]
    expected = HapPairList.from_index(index[0], probs[0], 0, 3).summarise(nmissing[0], False)
    assert summary == expected


def test_produce_summary_rejects_mismatched_lengths():
    with pytest.raises(ValueError):
        produce_summary([[(A, B)]], [[1.0]], 0, 3, [])