"""UBX frames, payload decoders and configuration for u-blox GNSS receivers, and an NTRIP client."""

__version__ = "0.1.0"