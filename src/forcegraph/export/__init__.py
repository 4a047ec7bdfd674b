"""
Export of rendered frames.

- SVG: Scalable Vector Graphics for web and print

Example usage:
    from forcegraph import GraphEngine
    from forcegraph.export import to_svg

    engine = GraphEngine()
    engine.set_graph(snapshot).run()

    with open("graph.svg", "w") as f:
        f.write(to_svg(engine.render(), engine.size))
"""

from .svg import to_svg

__all__ = ["to_svg"]
