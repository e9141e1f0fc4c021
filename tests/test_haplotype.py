import pytest

from phasehap.haplotype import Haplotype, n_diff


def test_default_alleles_are_zero():
    h = Haplotype("SSM")
    assert h.alleles == [0.0, 0.0, 0.0]
    assert h.nloci() == 3


def test_mismatched_alleles_rejected():
    with pytest.raises(ValueError):
        Haplotype("SS", [0, 1, 1])


def test_get_allele_rounds_and_fuzzy_keeps_value():
    h = Haplotype("SS", [0.4, 0.6])
    assert h.get_allele(0) == 0
    assert h.get_allele(1) == 1
    assert h.get_fuzzy_allele(1) == pytest.approx(0.6)


def test_set_allele():
    h = Haplotype("SS")
    h.set_allele(1, 1)
    assert h.get_allele(1) == 1
    assert h == Haplotype("SS", [0, 1])


def test_equality_and_order_ignore_locus_type():
    assert Haplotype("SS", [0, 1]) == Haplotype("MM", [0, 1])
    assert Haplotype("SS", [0, 1]) < Haplotype("SS", [1, 0])
    assert Haplotype("SS", [1, 0]) >= Haplotype("SS", [0, 1])
    assert sorted([Haplotype("SS", [1, 1]), Haplotype("SS", [0, 1])])[0] == Haplotype("SS", [0, 1])


def test_hash_consistent_with_equality():
    d = {Haplotype("SS", [0, 1]): "x"}
    assert d[Haplotype("SS", [0, 1])] == "x"


def test_section_and_concat_round_trip():
    h = Haplotype("SSMS", [0, 1, 7, 1])
    left, right = h.section(0, 2), h.section(2, 4)
    assert left.locus_type == "SS"
    assert right.alleles == [7.0, 1.0]
    joined = left.concat(right)
    assert joined == h
    assert joined.locus_type == h.locus_type


def test_section_out_of_range():
    with pytest.raises(IndexError):
        Haplotype("SS", [0, 1]).section(1, 3)


def test_matches_only_uses_listed_loci():
    a = Haplotype("SSS", [0, 1, 0])
    b = Haplotype("SSS", [0, 0, 0])
    assert a.matches(b, [0, 2])
    assert not a.matches(b, [1])
    assert a.matches(b, [])


def test_printed_len_counts_snp_and_microsat():
    assert Haplotype("SSS").printed_len() == 3
    assert Haplotype("SSM").printed_len() == 5


def test_format_snps():
    coding = [[ord("A"), ord("C")], [ord("G"), ord("T")]]
    assert Haplotype("SS", [0, 1]).format(coding) == "AT"


def test_format_microsat_after_snp():
    coding = [[ord("A"), 2], [ord("G"), 0]]
    assert Haplotype("SM", [1, 12]).format(coding) == "G 10 "


def test_n_diff():
    a = Haplotype("SSSS", [0, 1, 1, 0])
    b = Haplotype("SSSS", [1, 1, 0, 0])
    assert n_diff(a, b) == 2
    assert n_diff(a, a) == 0