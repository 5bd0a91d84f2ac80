"""Rust source analysis: parsing, extraction and the project model."""
