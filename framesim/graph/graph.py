import logging

logger = logging.getLogger(__name__)


class Node(object):
    def __init__(self, data=None):
        self.data = data
        self.incoming = []
        """:type: list[int]"""
        self.outgoing = []
        """:type: list[int]"""


class Edge(object):
    def __init__(self, tail, head, label=None):
        """
        :type tail: int
        :type head: int
        """
        self.tail = tail
        self.head = head
        self.label = label


class Graph(object):
    """A directed graph with payloads on nodes and labels on edges.

    Nodes and edges are referred to by the integer ids returned when they are created.
    Nodes and edges are never removed; node data and edge labels may be overwritten.
    """

    def __init__(self):
        self.nodes = []
        """:type: list[Node]"""
        self.edges = []
        """:type: list[Edge]"""

    def new_node(self, data=None):
        self.nodes.append(Node(data))
        return len(self.nodes) - 1

    def new_edge(self, tail, head, label=None):
        """Adds an edge tail -> head and returns its id

        :type tail: int
        :type head: int
        """
        self._check_node(tail)
        self._check_node(head)
        self.edges.append(Edge(tail, head, label))
        eid = len(self.edges) - 1
        self.nodes[tail].outgoing.append(eid)
        self.nodes[head].incoming.append(eid)
        return eid

    def _check_node(self, nid):
        if nid < 0 or nid >= len(self.nodes):
            raise ValueError('Node id {} is not in a graph of {} nodes'.format(nid, len(self.nodes)))

    def node_count(self):
        return len(self.nodes)

    def edge_count(self):
        return len(self.edges)

    def node_data(self, nid):
        return self.nodes[nid].data

    def set_node_data(self, nid, data):
        self.nodes[nid].data = data

    def edge_tail(self, eid):
        return self.edges[eid].tail

    def edge_head(self, eid):
        return self.edges[eid].head

    def edge_label(self, eid):
        return self.edges[eid].label

    def set_edge_label(self, eid, label):
        self.edges[eid].label = label

    def incoming_edges(self, nid):
        return list(self.nodes[nid].incoming)

    def outgoing_edges(self, nid):
        return list(self.nodes[nid].outgoing)
