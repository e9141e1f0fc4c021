"""Sorted lists of haplotypes with frequencies and working statistics."""

from __future__ import annotations

import bisect
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .haplotype import Haplotype


@dataclass
class HapRecord:
    """Statistics held for one haplotype in a :class:`HapList`."""

    freq: float = 0.0
    pseudo_count: float = 0.0
    prob: float = 0.0
    group_freq: List[float] = field(default_factory=list)
    group_freq_sq: List[float] = field(default_factory=list)
    sq_pseudo_count: float = 0.0


class HapList:
    """Haplotypes mapped to records, visited in sorted haplotype order.

    ``positive_haps`` holds ``(haplotype, record)`` pairs for the haplotypes
    whose frequency was positive when :meth:`make_positive_haps` was last
    called; the records are shared with the list.
    """

    def __init__(self) -> None:
        self._records: Dict[Haplotype, HapRecord] = {}
        self._keys: List[Haplotype] = []
        self.positive_haps: List[Tuple[Haplotype, HapRecord]] = []

    # construction -----------------------------------------------------

    @classmethod
    def section(cls, other: "HapList", firstlocus: int, lastlocus: int) -> "HapList":
        """A list of the haplotypes of ``other`` cut to loci ``firstlocus``..``lastlocus``."""
        result = cls()
        for hap, record in other._items():
            result.add_record(hap.section(firstlocus, lastlocus), record)
        result.make_positive_haps()
        return result

    @classmethod
    def concatenated(cls, h1: "HapList", h2: "HapList", minfreq: float = 0.0) -> "HapList":
        """Every haplotype of ``h1`` joined to every haplotype of ``h2``.

        Only haplotypes whose frequency exceeds ``minfreq`` take part.  A
        negative ``minfreq`` keeps instead those above the 50th largest
        frequency of their list (all of them when the list is shorter).
        Each joined haplotype receives the record of the rarer half.
        """
        result = cls()
        if minfreq >= 0:
            keep1 = [(h, r) for h, r in h1._items() if r.freq > minfreq]
            keep2 = [(h, r) for h, r in h2._items() if r.freq > minfreq]
        else:
            keep1 = _above_fiftieth(h1)
            keep2 = _above_fiftieth(h2)
        for hap1, rec1 in keep1:
            for hap2, rec2 in keep2:
                result.add_min(hap1.concat(hap2), rec1, rec2)
        result.make_positive_haps()
        return result

    # access -----------------------------------------------------------

    def _items(self) -> Iterator[Tuple[Haplotype, HapRecord]]:
        return ((hap, self._records[hap]) for hap in list(self._keys))

    def _insert(self, hap: Haplotype, record: HapRecord) -> HapRecord:
        self._records[hap] = record
        bisect.insort(self._keys, hap)
        return record

    def _record(self, hap: Haplotype) -> HapRecord:
        record = self._records.get(hap)
        if record is None:
            record = self._insert(hap, HapRecord())
        return record

    def _erase(self, hap: Haplotype) -> None:
        if hap in self._records:
            del self._records[hap]
            pos = bisect.bisect_left(self._keys, hap)
            del self._keys[pos]

    def __iter__(self) -> Iterator[Haplotype]:
        return iter(list(self._keys))

    def __contains__(self, hap: object) -> bool:
        return hap in self._records

    def __getitem__(self, hap: Haplotype) -> HapRecord:
        return self._records[hap]

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"HapList({len(self._keys)} haplotypes)"

    # adding -----------------------------------------------------------

    def add(self, hap: Haplotype, freq: float = 1.0) -> None:
        """Add ``freq`` to the frequency of ``hap``, inserting it if needed."""
        self._record(hap).freq += freq

    def add_new(self, hap: Haplotype, freq: float) -> Tuple[HapRecord, bool]:
        """Add ``freq`` to ``hap``; return its record and whether it was new.

        A new record gets zeroed group vectors as long as those of the
        first record in the list.
        """
        record = self._records.get(hap)
        is_new = record is None
        if is_new:
            ngroups = len(self._records[self._keys[0]].group_freq) if self._keys else 0
            record = self._insert(
                hap, HapRecord(group_freq=[0.0] * ngroups, group_freq_sq=[0.0] * ngroups)
            )
        record.freq += freq
        return record, is_new

    def add_record(self, hap: Haplotype, record: HapRecord) -> None:
        """Add the counts of ``record`` to those of ``hap`` and zero its group vectors."""
        target = self._record(hap)
        target.freq += record.freq
        target.pseudo_count += record.pseudo_count
        target.sq_pseudo_count += record.sq_pseudo_count
        target.prob += record.prob
        ngroups = len(self._records[self._keys[0]].group_freq)
        target.group_freq = [0.0] * ngroups
        target.group_freq_sq = [0.0] * ngroups

    def add_min(self, hap: Haplotype, record1: HapRecord, record2: HapRecord) -> None:
        """Add the counts of whichever record has the smaller frequency."""
        source = record1 if record1.freq < record2.freq else record2
        target = self._record(hap)
        target.freq += source.freq
        target.pseudo_count += source.pseudo_count
        target.prob += source.prob

    def add_multiple(self, hap: Haplotype, record1: HapRecord, record2: HapRecord) -> None:
        """Add the products of the counts of two records."""
        target = self._record(hap)
        target.freq += record1.freq * record2.freq
        target.pseudo_count += record1.pseudo_count * record2.pseudo_count
        target.prob += record1.prob * record2.prob

    def add_list(self, other: "HapList", minfreq: float = 0.0) -> None:
        """Add the frequencies of the haplotypes of ``other`` above ``minfreq``."""
        for hap, record in other._items():
            if record.freq > minfreq:
                self.add(hap, record.freq)

    # lookup -----------------------------------------------------------

    def find_matching(self, hap: Haplotype, uselist: Iterable[int]) -> Optional[Haplotype]:
        """The stored haplotype equal to ``hap``, or else the first agreeing at ``uselist``."""
        if hap in self._records:
            return next(k for k in self._keys[bisect.bisect_left(self._keys, hap):] if k == hap)
        uselist = list(uselist)
        return next((k for k in self._keys if hap.matches(k, uselist)), None)

    def haplotype_at(self, listpos: int) -> Haplotype:
        """The haplotype at position ``listpos`` in sorted order."""
        if not 0 <= listpos < len(self._keys):
            raise IndexError(f"list position {listpos} out of range")
        return self._keys[listpos]

    def positive_length(self) -> int:
        return len(self.positive_haps)

    def nloci(self) -> int:
        if not self._keys:
            raise ValueError("empty haplotype list has no loci")
        return self._keys[0].nloci()

    def ngroups(self) -> int:
        if not self._keys:
            raise ValueError("empty haplotype list has no groups")
        return len(self._records[self._keys[0]].group_freq)

    # removing ---------------------------------------------------------

    def hard_remove(self, hap: Haplotype) -> None:
        """Remove ``hap`` whatever its frequency."""
        self._erase(hap)

    def remove(self, hap: Haplotype, freq: float = 1.0) -> None:
        """Subtract ``freq``; drop the haplotype once its frequency is not positive."""
        record = self._record(hap)
        record.freq -= freq
        if record.freq <= 0:
            self._erase(hap)

    def soft_remove(self, hap: Haplotype, freq: float = 1.0) -> None:
        """Subtract ``freq`` but keep the haplotype in the list."""
        self._record(hap).freq -= freq

    def remove_all(self) -> None:
        self._records.clear()
        self._keys.clear()

    # bulk updates -----------------------------------------------------

    def make_positive_haps(self) -> None:
        """Rebuild ``positive_haps`` from the current frequencies."""
        self.positive_haps = [(h, r) for h, r in self._items() if r.freq > 0]

    def clear_pseudo_counts(self) -> None:
        for record in self._records.values():
            record.pseudo_count = 0.0
            record.sq_pseudo_count = 0.0

    def clear_probs(self) -> None:
        for record in self._records.values():
            record.prob = 0.0

    def clear_freqs(self) -> None:
        for record in self._records.values():
            record.freq = 0.0

    def setup_group_freqs(self, ngroups: int) -> None:
        for record in self._records.values():
            record.group_freq = [0.0] * ngroups
            record.group_freq_sq = [0.0] * ngroups

    def normalise_freqs(self) -> None:
        """Scale the frequencies to sum to one."""
        if not self._records:
            return
        total = sum(r.freq for r in self._records.values())
        for record in self._records.values():
            record.freq /= total

    def normalise_sq_pseudo_counts(self, norm: float) -> None:
        for record in self._records.values():
            record.sq_pseudo_count /= norm

    def normalise_group_freqs(self) -> None:
        """Scale each group's frequencies, and their squares, by the group total."""
        if not self._keys:
            return
        records = [self._records[k] for k in self._keys]
        for g in range(len(records[0].group_freq)):
            norm = sum(r.group_freq[g] for r in records)
            for record in records:
                record.group_freq[g] /= norm
                record.group_freq_sq[g] /= norm

    def randomise_freqs(self, rng: Optional[random.Random] = None) -> None:
        """Draw uniform frequencies and normalise them."""
        draw = (rng or random).random
        for hap in self._keys:
            self._records[hap].freq = draw()
        self.normalise_freqs()

    def copy_pseudo_counts_to_freqs(self) -> None:
        for record in self._records.values():
            record.freq = record.pseudo_count


def _above_fiftieth(hl: HapList) -> List[Tuple[Haplotype, HapRecord]]:
    items = list(hl._items())
    freqs = sorted(r.freq for _, r in items)
    if len(freqs) < 50:
        return items
    threshold = freqs[len(freqs) - 50]
    return [(h, r) for h, r in items if r.freq > threshold]