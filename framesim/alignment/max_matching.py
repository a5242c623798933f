import logging

from munkres import Munkres, make_cost_matrix

logger = logging.getLogger(__name__)


class MaxWeightMatching(object):
    """One-to-one assignment between two id sets maximizing the total weight (Munkres algorithm).

    Weights lie in [0, 1]; pairs never given a weight count as 0. The matrix is solved on cost = 1 - weight,
    squared with zero-cost padding rows or columns. Only pairs between the ids that were added are
    returned, with the weights they were given.
    """

    def __init__(self):
        self.left_ids = []
        self.right_ids = []
        self.left_index = dict()
        self.right_index = dict()
        self.weights = dict()
        """:type: dict[(int, int), float]"""

    def add_weight(self, left_id, right_id, weight):
        if left_id not in self.left_index:
            self.left_index[left_id] = len(self.left_ids)
            self.left_ids.append(left_id)
        if right_id not in self.right_index:
            self.right_index[right_id] = len(self.right_ids)
            self.right_ids.append(right_id)
        self.weights[(self.left_index[left_id], self.right_index[right_id])] = weight

    def weight_matrix(self):
        """
        :rtype: list[list[float]]
        """
        return [[self.weights.get((i, j), 0.0) for j in range(len(self.right_ids))]
                for i in range(len(self.left_ids))]

    def run(self):
        """
        :rtype: list[(object, object, float)]
        """
        if len(self.left_ids) == 0 or len(self.right_ids) == 0:
            return []

        cost = make_cost_matrix(self.weight_matrix(), lambda weight: 1.0 - weight)
        # compute pads a rectangular matrix with zero cost cells and leaves them out of its result
        index_pairs = Munkres().compute(cost)

        result = []
        for i, j in index_pairs:
            result.append((self.left_ids[i], self.right_ids[j], self.weights.get((i, j), 0.0)))
        logger.debug('Matched {} of {} x {} ids'.format(len(result), len(self.left_ids), len(self.right_ids)))
        return result


def max_weight_matching(triples):
    """
    :type triples: list[(object, object, float)]
    :rtype: list[(object, object, float)]
    """
    matching = MaxWeightMatching()
    for left_id, right_id, weight in triples:
        matching.add_weight(left_id, right_id, weight)
    return matching.run()
