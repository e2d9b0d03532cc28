"""
Hummingbird Foraging Simulation

A deterministic, headless foraging environment: depletable nectar flowers
in an area and a hummingbird agent that finds, approaches and drinks from
them while a reward signal shapes its behavior.

Architecture: the simulation core is engine independent. Physics, rendering
and the decision policy are collaborators behind narrow interfaces.
"""

__version__ = "0.1.0"
