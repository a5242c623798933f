import logging

logger = logging.getLogger(__name__)

# used when no label configuration is given: PropBank roles as produced by CoNLL-2009 and ASSERT style labelers
DEFAULT_LABEL_GROUPS = [
    ['V', 'TARGET'],
    ['A0', 'ARG0'],
    ['A1', 'ARG1'],
    ['A2', 'ARG2'],
    ['A3', 'ARG3'],
    ['A4', 'A5', 'AA', 'ARG4', 'ARG5', 'ARGA'],
    ['AM-LOC', 'ARGM-LOC'],
    ['AM-TMP', 'ARGM-TMP'],
    ['AM-MNR', 'ARGM-MNR'],
    ['AM-CAU', 'AM-PNC', 'AM-PRP', 'ARGM-CAU', 'ARGM-PNC', 'ARGM-PRP'],
    ['AM-DIR', 'AM-EXT', 'ARGM-DIR', 'ARGM-EXT'],
    ['AM-NEG', 'AM-MOD', 'ARGM-NEG', 'ARGM-MOD'],
    ['AM-ADV', 'AM-DIS', 'AM-PRD', 'AM-REC', 'AM-TM', 'ARGM-ADV', 'ARGM-DIS', 'ARGM-PRD', 'ARGM-REC'],
]

weight_types = {'uniform', 'lexweight'}

PREDICATE_COUNT_WEIGHT = 0.25
ARGUMENT_COUNT_WEIGHT = 1.0


class RoleDomain(object):
    """The role labels we know, grouped so that labels in one group count as the same role, with a weight per group"""

    def __init__(self, label_groups, weights=None):
        """
        :type label_groups: list[list[str]]
        :type weights: list[float]
        """
        self.label_groups = [list(group) for group in label_groups]
        self.label_index = dict()
        for i, group in enumerate(self.label_groups):
            for label in group:
                self.label_index[label] = i
        if weights is None:
            weights = [1.0] * len(self.label_groups)
        if len(weights) != len(self.label_groups):
            raise ValueError('Number of weights ({}) does not match the number of label groups ({})'.format(
                len(weights), len(self.label_groups)))
        self.weights = [float(w) for w in weights]

    def group_count(self):
        return len(self.label_groups)

    def get_label_index(self, label):
        if label in self.label_index:
            return self.label_index[label]
        else:
            raise ValueError('Input role label "%s" is not in the set of known role labels: %s' % (
                label, ','.join(sorted(self.label_index.keys()))))

    def get_weight(self, label):
        return self.weights[self.get_label_index(label)]

    def is_same_role(self, label, other_label):
        """Whether two labels fall in the same group; nothing matches the unaligned label 'U'"""
        if label == 'U' or other_label == 'U' or label is None or other_label is None:
            return False
        return self.get_label_index(label) == self.get_label_index(other_label)

    def estimate_weights(self, graphs):
        """Adds label counts of frame graphs to the weights: 0.25 per predicate and 1.0 per argument.
        Unrealized frames (empty predicate span) are not counted.

        :type graphs: list[framesim.graph.frame_graph.FrameGraph]
        """
        for graph in graphs:
            for pid in graph.get_predicates():
                if graph.get_role_span(pid).is_empty():
                    continue
                self.weights[self.get_label_index(graph.get_role_label(pid))] += PREDICATE_COUNT_WEIGHT
                for aid in graph.get_arguments(pid):
                    self.weights[self.get_label_index(graph.get_role_label(aid))] += ARGUMENT_COUNT_WEIGHT


def read_label_config(filepath):
    """One label group per non-empty line, labels separated by whitespace

    :rtype: list[list[str]]
    """
    groups = []
    with open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            labels = line.split()
            if len(labels) > 0:
                groups.append(labels)
    logger.info('Read {} label groups from {}'.format(len(groups), filepath))
    return groups


def read_weight_config(filepath):
    """Whitespace-separated weights, one per label group

    :rtype: list[float]
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        weights = [float(w) for w in f.read().split()]
    logger.info('Read {} role weights from {}'.format(len(weights), filepath))
    return weights


def create_role_domain(label_config='', weight_config=''):
    """
    :param label_config: label group file; the default PropBank groups when empty
    :param weight_config: a weight file, 'uniform' or 'lexweight' for fixed weights of 1.0, or empty for weights
                          to be estimated from reference and source frame graphs
    :rtype: RoleDomain
    """
    if label_config:
        groups = read_label_config(label_config)
    else:
        groups = DEFAULT_LABEL_GROUPS
    if weight_config and weight_config not in weight_types:
        return RoleDomain(groups, read_weight_config(weight_config))
    return RoleDomain(groups)
