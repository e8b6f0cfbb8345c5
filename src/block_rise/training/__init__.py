"""Command-line entry points: ``train_evolution`` and ``play_genome``."""
