"""RSVP speed-reading core: tokenizer, timing model, playback engine and persistence."""

__version__ = "0.1.0"
