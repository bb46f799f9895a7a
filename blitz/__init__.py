"""
Blitz - Dutch Blitz Simulation Engine

A rules-driven engine for simulating rounds of Dutch Blitz among
automated players. The engine provides:
- Card placement rules for shared foundations and personal cascades
- A turn/round state machine with win and stalemate detection
- Heuristic bot policies with configurable strategies
- Cross-round session statistics and read-only state snapshots
"""

__version__ = "0.1.0"
