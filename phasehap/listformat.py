"""Text renderings of haplotype lists and haplotype pairs."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .haplist import HapList
from .haplotype import Haplotype

Coding = Sequence[Sequence[int]]


def _fixed(value: float) -> str:
    return f"{value:12.6f}"


def _std_err(mean: float, mean_sq: float) -> float:
    return math.sqrt(max(mean_sq - mean * mean, 0.0))


def _header(plen: int, ngroups: int) -> str:
    parts: List[str] = [f"{'index':>10}", " " * max(plen - 10, 0), "  haplotype"]
    parts.append(f"{' E(freq)':>12}")
    parts.append(f"{' S.E':>12}")
    if ngroups > 1:
        for group in range(ngroups):
            parts.append(f"{' E[Freq(':>9}{group})]")
            parts.append(f"{' S.E.(':>10}{group})")
    return "".join(parts)


def format_list(
    haplist: HapList,
    coding: Coding,
    minimum: float = 0.0,
    print_header: bool = True,
) -> str:
    """Render every haplotype whose frequency is at least ``minimum``.

    Each row holds a running index, the haplotype and its frequency.  With
    ``print_header`` a header line is written first and each row also
    carries the standard error of the frequency and, when there is more
    than one group, each group's frequency and standard error.
    """
    if len(haplist) == 0:
        return ""

    haps = list(haplist)
    plen = haps[0].printed_len()
    ngroups = haplist.ngroups()

    lines: List[str] = []
    if print_header:
        lines.append(_header(plen, ngroups))

    count = 1
    for hap in haps:
        record = haplist[hap]
        if record.freq < minimum:
            continue
        parts = [f"{count:>10}", " " * max(11 - plen, 0), " ", hap.format(coding)]
        count += 1
        parts.append(_fixed(record.freq))
        if print_header:
            parts.append(_fixed(_std_err(record.freq, record.sq_pseudo_count)))
            if ngroups > 1:
                for gfreq, gfreq_sq in zip(record.group_freq, record.group_freq_sq):
                    parts.append(_fixed(gfreq))
                    parts.append(_fixed(_std_err(gfreq, gfreq_sq)))
        lines.append("".join(parts))

    return "".join(line + "\n" for line in lines)


def format_probs(haplist: HapList, coding: Coding, minimum: float = 0.0) -> str:
    """Render each haplotype with frequency at least ``minimum`` and its probability."""
    lines = []
    count = 1
    for hap in haplist:
        record = haplist[hap]
        if record.freq >= minimum:
            lines.append(f"{count} : {hap.format(coding)}({record.prob:g})\n")
            count += 1
    return "".join(lines)


def format_pair(pair: Tuple[Haplotype, Haplotype], coding: Coding) -> str:
    """Render a pair of haplotypes separated by a comma."""
    return f"{pair[0].format(coding)} , {pair[1].format(coding)}"