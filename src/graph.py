from typing import List, Tuple

import networkx as nx

from FogDevice import FogDevice


def create_fog_graph(devices_list: list[FogDevice]):

    graph = nx.DiGraph()
    # Add all devices with their attributes
    graph.add_nodes_from(
        (device.id, {
            'label': device.name,
            'role': device.role.value,
            'level': device.level,
            'mips': device.mips,
            'ram': device.ram,
            'uplink_bandwidth': device.uplink_bandwidth,
            'downlink_bandwidth': device.downlink_bandwidth,
        })
        for device in devices_list
    )

    # Edges point from child to parent
    graph.add_edges_from(
        (device.id, device.parent_id, {'latency': device.uplink_latency})
        for device in devices_list
        if not device.is_root
    )

    return graph


def is_valid_hierarchy(graph: nx.DiGraph) -> bool:
    """True if the child -> parent graph is a single tree rooted at the cloud."""
    if graph.number_of_nodes() == 0:
        return False
    # reversed, every device is reachable from the root exactly once
    return nx.is_arborescence(graph.reverse(copy=False))


def route(graph: nx.DiGraph, source: int, destination: int) -> List[Tuple[int, int, bool]]:
    """
    Hops between two devices of the tree.

    Returns:
        List of (from, to, upwards) triples; `upwards` is True when `to` is the
        parent of `from`
    """
    if source == destination:
        return []
    path = nx.shortest_path(graph.to_undirected(as_view=True), source, destination)
    return [(a, b, graph.has_edge(a, b)) for a, b in zip(path, path[1:])]
