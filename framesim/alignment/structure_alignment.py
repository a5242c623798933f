import logging

from framesim.alignment.max_matching import MaxWeightMatching
from framesim.common.utils import join
from framesim.similarity.cache import SimilarityCache
from framesim.similarity.lexical_similarity import modes

logger = logging.getLogger(__name__)

# stands in for a reference index in hypothesis alignments made against the source sentence
SOURCE_INDEX = -1

UNALIGNED_LABEL = 'U'


class AlignmentRecord(object):
    """Node alignments between a hypothesis frame graph and its reference (and source) frame graphs.

    hypothesis_alignments maps a hypothesis node to a list of (reference index or SOURCE_INDEX, node, similarity),
    one entry per reference or source it was aligned in, holding precision similarities.
    reference_alignments[i] and source_alignments map a reference or source node to (hypothesis node, similarity),
    holding recall similarities. Root nodes are always aligned.
    """

    def __init__(self, hypothesis, references, source=None):
        """
        :type hypothesis: framesim.graph.frame_graph.FrameGraph
        :type references: list[framesim.graph.frame_graph.FrameGraph]
        :type source: framesim.graph.frame_graph.FrameGraph
        """
        self.hypothesis = hypothesis
        self.references = list(references)
        self.source = source
        self.hypothesis_alignments = dict()
        """:type: dict[int, list[(int, int, float)]]"""
        self.reference_alignments = [dict() for _ in self.references]
        """:type: list[dict[int, (int, float)]]"""
        self.source_alignments = dict()
        """:type: dict[int, (int, float)]"""

    def has_source(self):
        return self.source is not None

    def reference_count(self):
        return len(self.references)

    def get_graph(self, mode, index=0):
        """
        :rtype: framesim.graph.frame_graph.FrameGraph
        """
        if mode == modes.HYP:
            return self.hypothesis
        elif mode == modes.SRC or index == SOURCE_INDEX:
            if self.source is None:
                raise ValueError('Alignment record has no source sentence')
            return self.source
        return self.references[index]

    def get_alignments(self, mode, index=0):
        """Recall-side alignment map of a reference, or of the source"""
        if mode == modes.SRC or index == SOURCE_INDEX:
            return self.source_alignments
        return self.reference_alignments[index]

    def add_hypothesis_alignment(self, hyp_nid, index, nid, similarity):
        self.hypothesis_alignments.setdefault(hyp_nid, []).append((index, nid, similarity))

    def get_hypothesis_alignment(self, hyp_nid):
        return list(self.hypothesis_alignments.get(hyp_nid, []))

    def sentence_similarity(self, mode, index=0):
        """Precision (hypothesis mode, best over all references and the source) or recall of the root alignment"""
        graph = self.get_graph(mode, index)
        return self.alignment_similarity(graph.get_root(), mode, index)

    def get_predicates(self, mode, index=0):
        return self.get_graph(mode, index).get_predicates()

    def get_arguments(self, predicate_id, mode, index=0):
        return self.get_graph(mode, index).get_arguments(predicate_id)

    def get_role_fillers(self, nid, mode, index=0):
        return self.get_graph(mode, index).get_role_filler_units(nid)

    def role_span_length(self, nid, mode, index=0):
        return self.get_graph(mode, index).get_role_span(nid).length()

    def get_role_label(self, nid, mode, index=0):
        return self.get_graph(mode, index).get_role_label(nid)

    def alignment_similarity(self, nid, mode, index=0):
        if mode == modes.HYP:
            entries = self.hypothesis_alignments.get(nid, [])
            return max([sim for _, _, sim in entries] + [0.0])
        alignments = self.get_alignments(mode, index)
        if nid in alignments:
            return alignments[nid][1]
        return 0.0

    def alignment_label(self, nid, mode, index=0):
        """Role label of the hypothesis node a reference or source node is aligned to, 'U' when unaligned"""
        alignments = self.get_alignments(mode, index)
        if nid in alignments:
            label = self.hypothesis.get_role_label(alignments[nid][0])
            return label if label is not None else UNALIGNED_LABEL
        return UNALIGNED_LABEL

    def to_string(self):
        """Tab-separated 'reference phrase, hypothesis phrase, similarity' lines for every recall alignment"""
        lines = []
        for i, alignments in enumerate(self.reference_alignments):
            lines.extend(self._alignment_lines(self.references[i], alignments))
        if self.has_source():
            lines.append(join(self.source.get_role_filler_units(self.source.get_root())))
            lines.extend(self._alignment_lines(self.source, self.source_alignments))
        return '\n'.join(lines)

    def _alignment_lines(self, graph, alignments):
        lines = []
        for nid in sorted(alignments):
            hyp_nid, sim = alignments[nid]
            lines.append('{}\t{}\t{}'.format(join(graph.get_role_filler_units(nid)),
                                             join(self.hypothesis.get_role_filler_units(hyp_nid)), sim))
        return lines


class StructureAligner(object):
    """Aligns a hypothesis frame graph to reference frame graphs: sentences, then predicates, then the
    arguments of aligned predicates. Predicate and argument alignments are optimal one-to-one matchings,
    solved separately for recall and precision.
    """

    def __init__(self, phrase_similarity):
        """
        :type phrase_similarity: framesim.similarity.phrase_similarity.PhraseSimilarity
        """
        self.phrase_similarity = phrase_similarity

    def align(self, hypothesis, references, source=None, cache=None):
        """
        :type hypothesis: framesim.graph.frame_graph.FrameGraph
        :type references: list[framesim.graph.frame_graph.FrameGraph]
        :type source: framesim.graph.frame_graph.FrameGraph
        :type cache: framesim.similarity.cache.SimilarityCache
        :rtype: AlignmentRecord
        """
        if cache is None:
            cache = SimilarityCache()
        record = AlignmentRecord(hypothesis, references, source)
        for index, reference in enumerate(references):
            self._align_graph(record, reference, record.reference_alignments[index], modes.REF, index, cache)
        if source is not None:
            self._align_graph(record, source, record.source_alignments, modes.SRC, SOURCE_INDEX, cache)
        return record

    def _phrase_similarity(self, graph, nid, hypothesis, hyp_nid, mode, cache):
        tokens = graph.get_role_filler_units(nid)
        hyp_tokens = hypothesis.get_role_filler_units(hyp_nid)
        if self.phrase_similarity.uses_vectors:
            return self.phrase_similarity.score(tokens, hyp_tokens, mode, cache,
                                                graph.get_role_filler_embeddings(nid),
                                                hypothesis.get_role_filler_embeddings(hyp_nid))
        return self.phrase_similarity.score(tokens, hyp_tokens, mode, cache)

    def _align_graph(self, record, graph, alignments, mode, index, cache):
        """
        :type record: AlignmentRecord
        :type graph: framesim.graph.frame_graph.FrameGraph
        :type alignments: dict[int, (int, float)]
        """
        hypothesis = record.hypothesis
        root = graph.get_root()
        hyp_root = hypothesis.get_root()
        precision, recall = self._phrase_similarity(graph, root, hypothesis, hyp_root, mode, cache)
        alignments[root] = (hyp_root, recall)
        record.add_hypothesis_alignment(hyp_root, index, root, precision)

        predicates = [p for p in graph.get_predicates() if not graph.get_role_span(p).is_empty()]
        hyp_predicates = [p for p in hypothesis.get_predicates() if not hypothesis.get_role_span(p).is_empty()]

        recall_matching = MaxWeightMatching()
        precision_matching = MaxWeightMatching()
        for pid in predicates:
            for hyp_pid in hyp_predicates:
                precision, recall = self._phrase_similarity(graph, pid, hypothesis, hyp_pid, mode, cache)
                recall_matching.add_weight(pid, hyp_pid, recall)
                precision_matching.add_weight(pid, hyp_pid, precision)

        for pid, hyp_pid, sim in recall_matching.run():
            alignments[pid] = (hyp_pid, sim)
            for aid, hyp_aid, arg_sim in self._match_arguments(graph, pid, hypothesis, hyp_pid, mode, cache, 1):
                alignments[aid] = (hyp_aid, arg_sim)

        for pid, hyp_pid, sim in precision_matching.run():
            record.add_hypothesis_alignment(hyp_pid, index, pid, sim)
            for aid, hyp_aid, arg_sim in self._match_arguments(graph, pid, hypothesis, hyp_pid, mode, cache, 0):
                record.add_hypothesis_alignment(hyp_aid, index, aid, arg_sim)

        logger.debug('Aligned {} predicates against {} hypothesis predicates ({} {})'.format(
            len(predicates), len(hyp_predicates), mode, index))

    def _match_arguments(self, graph, pid, hypothesis, hyp_pid, mode, cache, component):
        """Optimal argument matching of two aligned predicates on precision (component 0) or recall (1)"""
        arguments = [a for a in graph.get_arguments(pid) if not graph.get_role_span(a).is_empty()]
        hyp_arguments = [a for a in hypothesis.get_arguments(hyp_pid) if not hypothesis.get_role_span(a).is_empty()]
        matching = MaxWeightMatching()
        for aid in arguments:
            for hyp_aid in hyp_arguments:
                sims = self._phrase_similarity(graph, aid, hypothesis, hyp_aid, mode, cache)
                matching.add_weight(aid, hyp_aid, sims[component])
        return matching.run()
