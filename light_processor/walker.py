# ================================================================
# Light Processor - Prediction Walker
# ================================================================
# Greedy next-word generation over the registry's successor tables
# ================================================================

from typing import List, Sequence

from light_processor.config import MAX_STEPS, SEED_LIMIT
from light_processor.registry import WordRegistry


class PredictionWalker:
    """
    Deterministic greedy walker.

    `generate` MUTATES the registry: the (truncated) seed is ingested
    before walking. Use `walk` for a read-only traversal.
    """

    def __init__(self, registry: WordRegistry, seed_limit: int = SEED_LIMIT):
        self.registry = registry
        self.seed_limit = seed_limit

    def walk(self, start: str, max_steps: int = MAX_STEPS) -> List[str]:
        """
        Follow the highest-count successor from `start` for up to `max_steps`.

        Stops early at a word that is not registered or has no successors.
        Self-loops are followed like any other edge.
        """
        output = []
        current = start
        for _ in range(max_steps):
            word = self.registry.get(current)
            if word is None:
                break
            nxt = word.best_successor()
            if nxt is None:
                break
            output.append(nxt)
            current = nxt
        return output

    def prepare_seed(self, seed: Sequence[str]) -> List[str]:
        return list(seed)[:self.seed_limit]

    def generate(self, seed: Sequence[str], max_steps: int = MAX_STEPS) -> List[str]:
        """Ingest the seed (at most seed_limit tokens), then walk from its last token."""
        tokens = self.prepare_seed(seed)
        if not tokens:
            return []
        self.registry.add_tokens(tokens)
        return self.walk(tokens[-1], max_steps)
