import logging

import numpy as np

from framesim.alignment.structure_alignment import SOURCE_INDEX
from framesim.common.utils import safe_divide
from framesim.similarity.lexical_similarity import modes

logger = logging.getLogger(__name__)

frame_weight_types = {'coverage', 'uniform'}


class FrameFeatures(object):
    """Scores of one direction of one alignment: per label group similarities, structure and flat"""

    def __init__(self, group_count):
        self.label_similarities = np.zeros(group_count, dtype=np.float64)
        """:type: numpy.ndarray"""
        self.structure = 0.0
        self.flat = 0.0

    def to_list(self):
        return [float(v) for v in self.label_similarities] + [self.structure, self.flat]


class Scorer(object):
    """Turns an alignment record into a semantic similarity score.

    Each realized frame gets the weighted average similarity of its predicate and arguments, an argument only
    counting when it aligned to a node of the same role. Frames are averaged with their token coverage
    (or uniformly) into a structure score, which is mixed with the sentence level similarity (flat) by beta.
    Precision and recall are combined with the weighted harmonic mean governed by alpha.
    """

    def __init__(self, role_domain, phrase_similarity=None, alpha=0.5, beta=0.0, frame_weighting='coverage',
                 lexical_role_weights=False):
        """
        :type role_domain: framesim.tasks.role_domain.RoleDomain
        :type phrase_similarity: framesim.similarity.phrase_similarity.PhraseSimilarity
        :param lexical_role_weights: weight roles by the lexical weight of their fillers instead of their label
        """
        if not 0.0 <= alpha <= 1.0:
            raise ValueError('alpha must be in [0, 1], got {}'.format(alpha))
        if not 0.0 <= beta <= 1.0:
            raise ValueError('beta must be in [0, 1], got {}'.format(beta))
        if frame_weighting not in frame_weight_types:
            raise ValueError('Input frame weighting "%s" is not in the set of known frame weightings: %s' % (
                frame_weighting, ','.join(sorted(frame_weight_types))))
        if lexical_role_weights and phrase_similarity is None:
            raise ValueError('Lexical role weights need a phrase similarity model')
        self.role_domain = role_domain
        self.phrase_similarity = phrase_similarity
        self.alpha = alpha
        self.beta = beta
        self.frame_weighting = frame_weighting
        self.lexical_role_weights = lexical_role_weights

    def score(self, record):
        """
        :type record: framesim.alignment.structure_alignment.AlignmentRecord
        :rtype: float
        """
        precision = self.direction_score(self.precision_features(record))
        recall = self.direction_score(self.recall_features(record))
        if precision == 0.0 or recall == 0.0:
            return 0.0
        return safe_divide(precision * recall, self.alpha * precision + (1.0 - self.alpha) * recall)

    def features(self, record):
        """[per label precision..., precision structure, precision flat, per label recall..., recall structure,
        recall flat]
        """
        return self.precision_features(record).to_list() + self.recall_features(record).to_list()

    def direction_score(self, features):
        """
        :type features: FrameFeatures
        """
        return self.beta * features.structure + (1.0 - self.beta) * features.flat

    def precision_features(self, record):
        return self.compute_features(record, modes.HYP)

    def recall_features(self, record):
        """Structure and flat are each the best over the references and the source; the per label
        similarities come from whichever gives the best structure
        """
        result = FrameFeatures(self.role_domain.group_count())
        indices = list(range(record.reference_count()))
        if record.has_source():
            indices.append(SOURCE_INDEX)
        for index in indices:
            mode = modes.SRC if index == SOURCE_INDEX else modes.REF
            features = self.compute_features(record, mode, index)
            if features.structure > result.structure:
                result.structure = features.structure
                result.label_similarities = features.label_similarities
            if features.flat > result.flat:
                result.flat = features.flat
        return result

    def role_weight(self, record, nid, mode, index):
        if self.lexical_role_weights:
            return self.phrase_similarity.lexical_weight(record.get_role_fillers(nid, mode, index), mode)
        return self.role_domain.get_weight(record.get_role_label(nid, mode, index))

    def _argument_similarity(self, record, aid, label, mode, index):
        if mode == modes.HYP:
            # the best alignment of the argument, among references and source, to a node of the same role
            best = 0.0
            for other_index, other_nid, sim in record.get_hypothesis_alignment(aid):
                other_mode = modes.SRC if other_index == SOURCE_INDEX else modes.REF
                other_label = record.get_role_label(other_nid, other_mode, other_index)
                if sim > best and self.role_domain.is_same_role(label, other_label):
                    best = sim
            return best
        if self.role_domain.is_same_role(label, record.alignment_label(aid, mode, index)):
            return record.alignment_similarity(aid, mode, index)
        return 0.0

    def compute_features(self, record, mode, index=0):
        """
        :type record: framesim.alignment.structure_alignment.AlignmentRecord
        :rtype: FrameFeatures
        """
        group_count = self.role_domain.group_count()
        result = FrameFeatures(group_count)
        result.flat = record.sentence_similarity(mode, index)

        total_frame_weight = 0.0
        nom = 0.0
        denom = 0.0
        for pid in record.get_predicates(mode, index):
            if record.role_span_length(pid, mode, index) <= 0:
                continue
            sims = np.zeros(group_count, dtype=np.float64)
            counts = np.zeros(group_count, dtype=np.float64)

            pred_label = self.role_domain.get_label_index(record.get_role_label(pid, mode, index))
            pred_sim = record.alignment_similarity(pid, mode, index)
            pred_weight = self.role_weight(record, pid, mode, index)
            frame_weight = float(record.role_span_length(pid, mode, index))
            sims[pred_label] += pred_sim
            counts[pred_label] += 1.0
            fn = pred_weight * pred_sim
            fd = pred_weight

            for aid in record.get_arguments(pid, mode, index):
                frame_weight += record.role_span_length(aid, mode, index)
                label = record.get_role_label(aid, mode, index)
                label_index = self.role_domain.get_label_index(label)
                arg_sim = self._argument_similarity(record, aid, label, mode, index)
                arg_weight = self.role_weight(record, aid, mode, index)
                sims[label_index] += arg_sim
                counts[label_index] += 1.0
                fn += arg_weight * arg_sim
                fd += arg_weight

            if fn > 0 and fd > 0:
                if self.frame_weighting == 'coverage':
                    nom += frame_weight * (fn / fd)
                else:
                    nom += fn / fd
            denom += frame_weight if self.frame_weighting == 'coverage' else 1.0

            seen = counts > 0
            result.label_similarities[seen] += frame_weight * (sims[seen] / counts[seen])
            total_frame_weight += frame_weight

        if total_frame_weight > 0:
            result.label_similarities /= total_frame_weight
        if nom > 0 and denom > 0:
            result.structure = nom / denom
        return result


def document_score(scores):
    """Mean of sentence scores, 0 for an empty document"""
    if len(scores) == 0:
        return 0.0
    return float(np.mean(scores))
