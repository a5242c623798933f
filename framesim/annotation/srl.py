import shlex
import logging
import subprocess

import abc

from framesim.annotation.assert_format import read_assert_file
from framesim.annotation.conll09 import read_conll09_blocks
from framesim.annotation.conll09 import read_conll09_file
from framesim.annotation.conll09 import split_conll09_blocks
from framesim.graph.frame_graph import FrameGraph

logger = logging.getLogger(__name__)


class SemanticRoleLabeler(object, metaclass=abc.ABCMeta):
    """Produces one frame graph per sentence, in order, each graph wrapping its input sentence"""

    @abc.abstractmethod
    def parse(self, sentences):
        """
        :type sentences: list[framesim.text.text_span.Sentence]
        :rtype: list[framesim.graph.frame_graph.FrameGraph]
        """
        pass


class TokenLabeler(SemanticRoleLabeler):
    """No semantic parse: graphs with only a root over the sentence tokens"""

    class Factory(object):
        def create(self, path):
            return TokenLabeler()

    def parse(self, sentences):
        return [FrameGraph(sentence) for sentence in sentences]


class ConllParseReader(SemanticRoleLabeler):
    """Reads parses that were produced beforehand, in CoNLL-2009 format"""

    def __init__(self, parse_file):
        self.parse_file = parse_file

    class Factory(object):
        def create(self, path):
            if not path:
                raise ValueError('SRL type "read" needs the path of a CoNLL-2009 parse file')
            return ConllParseReader(path)

    def parse(self, sentences):
        return read_conll09_file(self.parse_file, sentences)


class AssertParseReader(SemanticRoleLabeler):
    """Reads parses that were produced beforehand, in ASSERT format"""

    def __init__(self, parse_file):
        self.parse_file = parse_file

    class Factory(object):
        def create(self, path):
            if not path:
                raise ValueError('SRL type "assert" needs the path of an ASSERT parse file')
            return AssertParseReader(path)

    def parse(self, sentences):
        return read_assert_file(self.parse_file, sentences)


class ExternalCommandLabeler(SemanticRoleLabeler):
    """Runs an external SRL parser. The command reads one tokenized sentence per line on its standard input
    and writes CoNLL-2009 to its standard output, an empty line after each sentence.
    """

    def __init__(self, command):
        """
        :type command: str
        """
        self.command = shlex.split(command)

    class Factory(object):
        def create(self, path):
            if not path:
                raise ValueError('SRL type "command" needs the parser command line')
            return ExternalCommandLabeler(path)

    def parse(self, sentences):
        text = ''.join(sentence.to_string() + '\n' for sentence in sentences)
        logger.info('Running SRL command {} on {} sentences'.format(' '.join(self.command), len(sentences)))
        try:
            result = subprocess.run(
                self.command,
                input=text.encode('utf-8'),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except FileNotFoundError as e:
            raise RuntimeError('SRL command not found: {}'.format(self.command[0])) from e
        except subprocess.CalledProcessError as e:
            raise RuntimeError('SRL command failed with exit code {}: {}'.format(
                e.returncode, e.stderr.decode('utf-8', errors='replace'))) from e
        blocks = split_conll09_blocks(result.stdout.decode('utf-8').splitlines())
        return read_conll09_blocks(blocks, sentences)


class SemanticRoleLabelerFactory(object):
    factories = {}

    @staticmethod
    def add_factory(id, factory):
        SemanticRoleLabelerFactory.factories[id] = factory

    @staticmethod
    def createSemanticRoleLabeler(id, path=''):
        """
        :param id: '' or 'tok' for no parse, 'read' for CoNLL-2009 files, 'assert' for ASSERT files,
                   'command' for an external parser
        :rtype: SemanticRoleLabeler
        """
        if id in SemanticRoleLabelerFactory.factories:
            return SemanticRoleLabelerFactory.factories[id].create(path)
        else:
            raise RuntimeError('SRL type not supported: {}'.format(id))


SemanticRoleLabelerFactory.add_factory('', TokenLabeler.Factory())
SemanticRoleLabelerFactory.add_factory('tok', TokenLabeler.Factory())
SemanticRoleLabelerFactory.add_factory('read', ConllParseReader.Factory())
SemanticRoleLabelerFactory.add_factory('assert', AssertParseReader.Factory())
SemanticRoleLabelerFactory.add_factory('command', ExternalCommandLabeler.Factory())
