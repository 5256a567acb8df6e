#!/usr/bin/env python3
"""
Demo script for layerflow.

Lays out a few small DAGs with different operator combinations and prints
the resulting coordinates, crossing counts and a debug trace.
"""

import logging
import sys

from layerflow import (
    coord_center,
    coord_greedy,
    coord_min_curve,
    coord_vert,
    create_dag,
    decross_opt,
    layering_coffman_graham,
    layering_longest_path,
    sugiyama,
)


def print_header(title):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70 + "\n")


def print_layout(result):
    """Print node coordinates and link waypoints."""
    print(f"size: {result.width:.2f} x {result.height:.2f}")
    for node in result.dag:
        print(f"  {node.id:>10}  layer {node.layer}  x={node.x:6.2f}  y={node.y:6.2f}")
    for link in result.dag.links():
        points = " -> ".join(f"({x:.2f}, {y:.2f})" for x, y in link.points)
        print(f"  {link.source.id} -> {link.target.id}: {points}")


def workflow():
    return create_dag(
        [
            ("Plan", "Design"),
            ("Design", "Code"),
            ("Code", "Test"),
            ("Test", "Review"),
            ("Review", "Deploy"),
            ("Plan", "Review"),
            ("Design", "Deploy"),
        ]
    )


def demo_1():
    """Demo 1: Default operators"""
    print_header("Demo 1: Default Layout")
    print_layout(sugiyama()(workflow()))


def demo_2():
    """Demo 2: Coordinate operators side by side"""
    print_header("Demo 2: Coordinate Operators")
    for name, coord in [
        ("center", coord_center()),
        ("vert", coord_vert()),
        ("minCurve", coord_min_curve()),
        ("greedy", coord_greedy()),
    ]:
        print(f"--- {name} ---")
        print_layout(sugiyama().with_coord(coord)(workflow()))
        print()


def demo_3():
    """Demo 3: Exact crossing minimization with a debug trace"""
    print_header("Demo 3: Optimal Decrossing")
    layout = (
        sugiyama()
        .with_layering(layering_longest_path())
        .with_decross(decross_opt())
        .with_debug(True)
    )
    result = layout(workflow())
    decross = result.trace.get_stage("decross")
    print(f"crossings: {decross.data['before']} -> {decross.data['after']}")
    print()
    print(result.trace.dump())


def demo_4():
    """Demo 4: Width-bounded layering and custom node sizes"""
    print_header("Demo 4: Coffman-Graham Layering")
    layout = (
        sugiyama()
        .with_layering(layering_coffman_graham().with_width(2))
        .with_node_size(lambda node: (len(str(node.id)), 1))
        .with_size((400, 300))
    )
    print_layout(layout(workflow()))


def main():
    if "-v" in sys.argv:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    demo_1()
    demo_2()
    demo_3()
    demo_4()


if __name__ == "__main__":
    main()
