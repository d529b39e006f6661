"""
Dragspec - Declarative drag-and-drop resolution

Describes where a dragged element can go as a tree of spec nodes and
resolves that tree against the pointer on every move. Provides:
- An amb evaluator for enumerating candidate states
- Spec nodes (fixed, continuous, nearest-of, layered fallback, chained,
  metric override) and their constructors
- A resolver producing previews and active paths
- Drag sessions that commit or cancel on release
"""

__version__ = "0.1.0"
