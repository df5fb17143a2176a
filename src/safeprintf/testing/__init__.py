from __future__ import annotations

from .corpus import generate_c_sources, generate_call, generate_corpus_files

__all__ = ["generate_c_sources", "generate_call", "generate_corpus_files"]
