"""Benchmark records, defaults and exceptions."""
