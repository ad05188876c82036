# ================================================================
# Light Processor - Word Registry
# ================================================================
# Incremental bigram store: words, frequencies and successor counts
# under a hard capacity bound
# ================================================================

import random
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from light_processor.config import CAPACITY, SATURATION_FLOOR


@dataclass
class Word:
    """A registered word and its observed successors."""
    text: str
    frequency: int = 1
    hue: float = 0.0          # fixed at creation, visual only
    saturation: float = 1.0   # fixed at creation, visual only
    successors: Dict[str, int] = field(default_factory=dict)

    def best_successor(self) -> Optional[str]:
        """
        Successor with the strictly highest count.
        Ties go to the successor recorded first.
        """
        best, best_count = None, 0
        for text, count in self.successors.items():
            if count > best_count:
                best, best_count = text, count
        return best

    def to_dict(self):
        return {
            "text": self.text,
            "frequency": self.frequency,
            "hue": self.hue,
            "saturation": self.saturation,
            "successors": list(self.successors.items()),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            text=data["text"],
            frequency=int(data["frequency"]),
            hue=float(data["hue"]),
            saturation=float(data["saturation"]),
            successors={k: int(v) for k, v in data["successors"]},
        )


class WordRegistry:
    """
    Authoritative store of words and their successor statistics.

    Words are keyed by text and never removed. Once `capacity` words
    exist, pairs whose current word is new are dropped; existing words
    keep counting and may still gain new successor keys.

    Snapshot order is frequency descending, ties by insertion order.
    """

    def __init__(self, capacity: int = CAPACITY, rng: Optional[random.Random] = None):
        self.capacity = capacity
        self.rng = rng or random.Random()
        self._words: Dict[str, Word] = {}
        self.version = 0
        self._snapshot: Optional[List[Word]] = None
        self._snapshot_version = -1

    def add_tokens(self, tokens: Sequence[str]):
        """
        Apply every adjacent (current, next) pair of `tokens`.

        A trailing token with no successor changes nothing on its own, so
        empty and single-token input are no-ops.
        """
        mutated = False
        words = self._words
        for current, nxt in zip(tokens, tokens[1:]):
            word = words.get(current)
            if word is not None:
                word.frequency += 1
                word.successors[nxt] = word.successors.get(nxt, 0) + 1
            elif len(words) < self.capacity:
                words[current] = Word(
                    text=current,
                    frequency=1,
                    hue=self.rng.random(),
                    saturation=SATURATION_FLOOR + (1.0 - SATURATION_FLOOR) * self.rng.random(),
                    successors={nxt: 1},
                )
            else:
                continue
            mutated = True

        if mutated:
            self.version += 1
            self._snapshot = None

    def snapshot(self) -> List[Word]:
        """
        All words, frequency descending, first-inserted first on ties.

        Entries are point-in-time copies: later add_tokens calls do not
        change them, and editing them does not touch the registry.
        """
        if self._snapshot is None or self._snapshot_version != self.version:
            # sorted() is stable and dict iteration follows insertion order
            ranked = sorted(self._words.values(), key=lambda w: -w.frequency)
            self._snapshot = [replace(w, successors=dict(w.successors)) for w in ranked]
            self._snapshot_version = self.version
        return [replace(w, successors=dict(w.successors)) for w in self._snapshot]

    def top(self, n: int) -> List[Word]:
        return self.snapshot()[:n]

    def get(self, text: str) -> Optional[Word]:
        return self._words.get(text)

    @property
    def is_full(self) -> bool:
        return len(self._words) >= self.capacity

    def __len__(self):
        return len(self._words)

    def __contains__(self, text):
        return text in self._words

    def __iter__(self):
        return iter(self._words.values())

    # ------------------------------------------------------------
    # Checkpoint state
    # ------------------------------------------------------------

    def state_dict(self):
        """Plain-data copy of the registry, insertion order preserved."""
        return {
            "capacity": self.capacity,
            "version": self.version,
            "words": [w.to_dict() for w in self._words.values()],
        }

    def load_state_dict(self, state):
        """
        Replace all words in place. The configured capacity is kept:
        saved words past it are dropped, newest insertions first.
        """
        words = {}
        dropped = 0
        for data in state["words"]:
            if len(words) >= self.capacity:
                dropped += 1
                continue
            word = Word.from_dict(data)
            words[word.text] = word
        if dropped:
            print(f"[Registry] Dropped {dropped} saved words over capacity {self.capacity}")
        self._words = words
        # Bump past both versions so cached snapshots are never reused
        self.version = max(self.version, int(state.get("version", 0))) + 1
        self._snapshot = None
