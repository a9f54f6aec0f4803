from app.summary.text import DEFAULT_CHUNK_WORDS, Chunk, build_chunks, count_words, split_into_chunks

__all__ = [
    "DEFAULT_CHUNK_WORDS",
    "Chunk",
    "build_chunks",
    "count_words",
    "split_into_chunks",
]
