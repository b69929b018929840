"""Peer-to-peer NFT marketplace with escrowed proceeds."""

__version__ = "0.1.0"
