"""Carguino: build Rust firmware for Arduino boards with cargo."""

__version__ = "0.1.0"
