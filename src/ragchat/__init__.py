"""RagChat: retrieval-augmented chat over a private text corpus."""

__version__ = "0.1.0"
