"""Qt gallery adapters. Importing this package requires PyQt6."""
