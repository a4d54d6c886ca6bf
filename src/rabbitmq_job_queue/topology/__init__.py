"""Exchange and queue declaration."""

from .topology_manager import TopologyCache, TopologyManager

__all__ = ["TopologyCache", "TopologyManager"]
