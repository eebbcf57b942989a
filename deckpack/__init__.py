"""deckpack - release and packaging pipeline for OpenDeck plugins."""

__version__ = "0.1.0"
