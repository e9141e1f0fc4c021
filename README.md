# phasehap

This package provides building blocks for haplotype phase reconstruction:

- haplotypes that hold SNP and microsatellite loci;
- a sorted list of haplotypes with estimated frequencies;
- copying-model probabilities for scoring a haplotype against that list;
- summaries of how uncertain a reconstructed pair of haplotypes is.

It uses only the standard library.

## Installation

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Modules

### `phasehap.haplotype`

`Haplotype(locus_type, alleles)` holds one allele per locus. `locus_type` is a string such as `"SSMS"`, in which `S` marks a SNP and `M` a microsatellite.

- Alleles are stored as floats. `get_allele` rounds an allele to the nearest integer, and `get_fuzzy_allele` returns the stored value.
- `section(first, last)` returns a slice of the haplotype, and `concat(other)` joins two haplotypes.
- `matches(other, uselist)` compares two haplotypes at the chosen loci only.
- `printed_len()` gives the printed width, and `format(coding)` renders the haplotype as text.
- Equality, ordering and hashing depend on the alleles only.

`n_diff(h1, h2)` counts the loci at which the rounded alleles of two haplotypes differ.

### `phasehap.haplist`

`HapList` maps haplotypes to `HapRecord`s and visits them in sorted order. A `HapRecord` holds these fields:

- `freq`
- `pseudo_count`
- `prob`
- `group_freq`
- `group_freq_sq`
- `sq_pseudo_count`

Building a list:

- `section(other, firstlocus, lastlocus)` builds a list from a slice of every haplotype in `other`.
- `concatenated(h1, h2, minfreq)` joins every pair of haplotypes from two lists. Each joined haplotype takes the record of the rarer half.
- A negative `minfreq` keeps only the haplotypes above the 50th largest frequency of each list.

Adding:

- `add`
- `add_new`, which also reports whether the haplotype was new
- `add_record`
- `add_min`
- `add_multiple`
- `add_list`

Removing:

- `remove` drops a haplotype once its frequency is no longer positive.
- `soft_remove` only lowers the frequency.
- `hard_remove` drops a haplotype whatever its frequency.
- `remove_all` empties the list.

Bulk updates:

- `clear_freqs`, `clear_probs` and `clear_pseudo_counts`
- `setup_group_freqs`
- `normalise_freqs`, `normalise_sq_pseudo_counts` and `normalise_group_freqs`
- `randomise_freqs(rng)`
- `copy_pseudo_counts_to_freqs`

`make_positive_haps()` rebuilds `positive_haps`. That list holds the `(haplotype, record)` pairs whose frequency is positive, and the probability routines copy only from those haplotypes.

### `phasehap.listformat`

These functions return a list or a pair as text:

- `format_list(haplist, coding, minimum, print_header)` writes a table of index, haplotype and frequency. With a header, each row also carries the standard error and, when there is more than one group, the frequency and standard error of each group.
- `format_probs(haplist, coding, minimum)`
- `format_pair(pair, coding)`

### `phasehap.happairlist`

`HapPairList` is a distribution over pairs of haplotypes. Its methods:

- `from_index`
- `section`
- `add`
- `best_pair`, which returns the best pair and its share of the total
- `compute_flip_err_allele_probs`
- `kl_divergence`, `best_kl_divergence` and `kl_split_divergence`
- `summarise` and `summarise_range`, which split the loci into segments where that scores better

The module also has these functions:

- `best_flip_err_allele`
- `match_prob`
- `is_heterozygous`

### `phasehap.summary`

`Summary` holds one or more segments. Each segment has four parts:

- a best-guess pair
- per-locus flip probabilities
- error probabilities
- replacement-allele probabilities

`Summary.single` builds a one-segment summary, `merge` joins two summaries, and `format(coding)` renders a summary as five lines of text.

### `phasehap.pairindex`

These functions work on a per-individual index of candidate pairs and the matching phase probabilities:

- `prune_pairs_index(index, phaseprobs, minthreshold)`
- `find_best_pair(index, phaseprobs, startlocus, endlocus)`
- `produce_summary(index, phaseprobs, startlocus, endlocus, nmissing, allowsplit)` summarises each individual as a single segment.

### `phasehap.probs`

These functions give the probability of a haplotype given a `HapList`:

- EM: `em_prob` and `compute_em_probs`.
- Without recombination: `sd_prob`, and `snp_sd_prob` for data made only of SNPs.
- With recombination: `forwards_algorithm`, `backwards_algorithm` (which samples the copied haplotype), `hidden_state_probs` and `fdls_prob`.

You supply the mutation model as a callable, `hit_prob(locus, t, from_allele, target)`. The argument `t` is the index of the quadrature point, or `None` when quadrature is not used.

## Example

```python
from phasehap.haplotype import Haplotype, n_diff
from phasehap.haplist import HapList

a = Haplotype("SSS", [0, 1, 0])
b = Haplotype("SSS", [1, 1, 0])

haps = HapList()
haps.add(a, 3.0)
haps.add(b, 1.0)
haps.normalise_freqs()

print(len(haps), n_diff(a, b))   # 2 1
print(haps[a].freq)              # 0.75
```

## What the package does not do

- It has no command-line program and reads no genotype files.
- It has no representation of individuals or genotypes. The caller builds the index of candidate pairs for each individual from its genotype data, and the caller runs the iterations that resolve phase across a sample.
- It has no array of copying probabilities between the chromosomes of a sample.