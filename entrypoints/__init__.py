"""Per-platform daemon entrypoints"""
