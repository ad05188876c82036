# ================================================================
# Light Processor - Owning Component
# ================================================================
# Wires registry, encoder, walker and ingestion pipeline together.
# One instance = one independent model.
# ================================================================

import os
import pickle
import random
from typing import Callable, List, Optional, Sequence

import numpy as np

from light_processor.config import ProcessorConfig
from light_processor.encoder import VisualEncoder
from light_processor.pipeline import IngestionPipeline, IngestionReport, MutationQueue
from light_processor.registry import WordRegistry
from light_processor.tokens import tokenize_document, tokenize_phrase
from light_processor.walker import PredictionWalker

STATS_TOP_WORDS = 100


class LightProcessor:
    """
    Bigram word model with a fixed-size visual encoding.

    Sync methods (add_tokens, generate, process_input) mutate directly.
    Async methods go through the mutation queue so they can share an
    event loop with ingestion.
    """

    def __init__(self, config: Optional[ProcessorConfig] = None):
        self.config = (config or ProcessorConfig()).validate()
        cfg = self.config

        self.registry = WordRegistry(capacity=cfg.capacity, rng=random.Random(cfg.seed))
        self.encoder = VisualEncoder(
            grid_side=cfg.grid_side,
            initial_fill=cfg.initial_fill,
            rng=np.random.default_rng(cfg.seed),
        )
        self.walker = PredictionWalker(self.registry, seed_limit=cfg.seed_limit)
        self.queue = MutationQueue(self.registry)
        self.pipeline = IngestionPipeline(self.queue, batch_size=cfg.batch_size)

        self._encoded_version = -1

    # ------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------

    def add_tokens(self, tokens: Sequence[str]):
        self.registry.add_tokens(tokens)

    def generate(self, seed: Sequence[str], max_steps: Optional[int] = None) -> List[str]:
        """Mutating: ingests the seed before walking."""
        steps = self.config.max_steps if max_steps is None else max_steps
        return self.walker.generate(seed, steps)

    def process_input(self, phrase: str, max_steps: Optional[int] = None) -> str:
        """Typed phrase in, generated phrase out."""
        return " ".join(self.generate(tokenize_phrase(phrase), max_steps))

    async def generate_async(self, seed: Sequence[str], max_steps: Optional[int] = None) -> List[str]:
        # Seed ingestion and walk run as one step in the mutation queue
        return await self.queue.run(self.generate, seed, max_steps)

    async def ingest_tokens(self, tokens: Sequence[str], on_progress: Optional[Callable] = None,
                            cancel_event=None) -> IngestionReport:
        return await self.pipeline.ingest(tokens, on_progress=on_progress, cancel_event=cancel_event)

    async def ingest_text(self, text: str, on_progress: Optional[Callable] = None,
                          cancel_event=None) -> IngestionReport:
        return await self.ingest_tokens(tokenize_document(text), on_progress, cancel_event)

    async def ingest_file(self, path, on_progress: Optional[Callable] = None,
                          cancel_event=None) -> IngestionReport:
        return await self.pipeline.ingest_file(path, on_progress=on_progress, cancel_event=cancel_event)

    # ------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------

    def snapshot(self):
        return self.registry.snapshot()

    def export_grid(self) -> np.ndarray:
        """Flat float32 grid, re-encoded if the registry changed since last export."""
        if self._encoded_version != self.registry.version:
            self.encoder.encode(self.registry.snapshot())
            self._encoded_version = self.registry.version
        return self.encoder.buffer

    def export_bytes(self) -> bytes:
        self.export_grid()
        return self.encoder.to_bytes()

    def stats(self, top: int = STATS_TOP_WORDS):
        words = self.registry.snapshot()
        return {
            "word_count": len(words),
            "capacity": self.registry.capacity,
            "version": self.registry.version,
            "top": [
                {
                    "word": w.text,
                    "frequency": w.frequency,
                    "hue": w.hue,
                    "saturation": w.saturation,
                }
                for w in words[:top]
            ],
            "more": max(0, len(words) - top),
        }

    # ------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------

    def save_checkpoint(self, path: Optional[str] = None) -> str:
        path = path or self.config.checkpoint_path
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        checkpoint = {
            "config": self.config.to_dict(),
            "registry": self.registry.state_dict(),
        }
        with open(path, "wb") as f:
            pickle.dump(checkpoint, f)
        print(f"[Checkpoint] Saved {len(self.registry)} words to: {path}")
        return path

    def load_checkpoint(self, path: Optional[str] = None):
        path = path or self.config.checkpoint_path
        with open(path, "rb") as f:
            checkpoint = pickle.load(f)
        self.registry.load_state_dict(checkpoint["registry"])
        print(f"[Checkpoint] Loaded {len(self.registry)} words from: {os.path.basename(path)}")
        return self
