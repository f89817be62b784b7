"""plansync: change detection for agent-edited plan documents."""

__version__ = "0.1.0"
