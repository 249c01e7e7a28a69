"""
Namespace registry, message repository, round oracle and contract tests
"""
import pytest

from zkiop.errors import (
    IncompatibleProtocols, MalformedProof, MissingRound, NamespaceNotFound,
    OracleQueryOutOfBounds, TranscriptFrozen,
)
from zkiop.field import FR
from zkiop.iop.bookkeeper import MessageBookkeeper, NameSpace, Side
from zkiop.iop.message import (
    Bits, Bytes, FieldElements, MessagesCollection, MsgRoundRef, ProverRoundMessageInfo,
)
from zkiop.iop.oracles import (
    RecordingRoundOracle, RoundOracle, SuccinctRoundOracle, coset_leaves, split_leaf,
)
from zkiop.iop.prover import IOPProver, ProverParam, verifier_param_for
from zkiop.iop.verifier import IOPVerifier, ProtocolPair
from zkiop.merkle import MerkleTree, MerkleTreeParameters
from zkiop.sponge import FieldElementSize


def _short_round(value=1):
    return RoundOracle(ProverRoundMessageInfo(num_short_messages=1), [[FR(value)]])


# =====================================================================
# Namespace registry
# =====================================================================

class TestBookkeeper:
    def test_sequential_namespace_ids(self):
        bk = MessageBookkeeper()
        a = bk.new_namespace(bk.root, "a")
        b = bk.new_namespace(bk.root, "b")
        c = bk.new_namespace(a, "c")
        assert [ns.id for ns in (bk.root, a, b, c)] == [0, 1, 2, 3]
        assert bk.parent(c) == a
        assert bk.children(bk.root) == [a, b]
        assert bk.root.is_root and not c.is_root

    def test_unknown_namespace(self):
        bk = MessageBookkeeper()
        with pytest.raises(NamespaceNotFound):
            bk.new_namespace(NameSpace(42))
        with pytest.raises(NamespaceNotFound):
            bk.next_round(NameSpace(42), Side.PROVER)
        with pytest.raises(NamespaceNotFound):
            bk.namespace(7)

    def test_round_indices(self):
        bk = MessageBookkeeper()
        ns = bk.new_namespace(bk.root)
        assert bk.attach_round(bk.root, Side.PROVER, 0) == 0
        assert bk.attach_round(ns, Side.PROVER, 1) == 0
        assert bk.attach_round(bk.root, Side.PROVER, 2) == 1
        assert bk.round_index(bk.root, Side.PROVER, 1) == 2
        assert bk.next_round(ns, Side.PROVER) == 1
        assert bk.num_rounds(ns, Side.VERIFIER) == 0

    def test_indices_strictly_increase(self):
        bk = MessageBookkeeper()
        bk.attach_round(bk.root, Side.VERIFIER, 3)
        with pytest.raises(ValueError):
            bk.attach_round(bk.root, Side.VERIFIER, 3)

    def test_missing_round(self):
        bk = MessageBookkeeper()
        with pytest.raises(MissingRound):
            bk.round_index(bk.root, Side.VERIFIER, 0)

    def test_summary(self):
        bk = MessageBookkeeper()
        ns = bk.new_namespace(bk.root)
        bk.attach_round(ns, Side.VERIFIER, 0)
        assert bk.summary() == {0: (None, (), ()), 1: (0, (), (0,))}


# =====================================================================
# Message repository
# =====================================================================

class TestMessagesCollection:
    def test_sibling_namespaces_are_isolated(self):
        messages = MessagesCollection()
        bk = messages.bookkeeper
        first = bk.new_namespace(bk.root, "first")
        second = bk.new_namespace(bk.root, "second")
        messages.append_prover_round(first, _short_round(5))
        assert messages.prover_round(first, 0).get_short_message(0) == [FR(5)]
        with pytest.raises(MissingRound):
            messages.prover_round(second, 0)
        with pytest.raises(MissingRound):
            messages.prover_round(bk.root, 0)

    def test_lookup_by_reference(self):
        messages = MessagesCollection()
        root = messages.bookkeeper.root
        messages.append_prover_round(root, _short_round(1))
        messages.append_prover_round(root, _short_round(2))
        oracle = messages.prover_round_by_ref(MsgRoundRef(root, 1))
        assert oracle.get_short_message(0) == [FR(2)]

    def test_verifier_rounds(self):
        messages = MessagesCollection()
        root = messages.bookkeeper.root
        messages.append_verifier_round(root, [Bytes(b"\x01\x02")])
        assert messages.verifier_round(root, 0) == [Bytes(b"\x01\x02")]
        assert messages.num_verifier_rounds(root) == 1

    def test_frozen_repository_rejects_appends(self):
        messages = MessagesCollection()
        root = messages.bookkeeper.root
        messages.append_prover_round(root, _short_round())
        messages.freeze()
        with pytest.raises(TranscriptFrozen):
            messages.append_prover_round(root, _short_round())
        with pytest.raises(TranscriptFrozen):
            messages.append_verifier_round(root, [Bits([True])])
        assert messages.prover_round(root, 0).get_short_message(0) == [FR(1)]

    def test_rounds_with_degree_bounds(self):
        messages = MessagesCollection()
        bk = messages.bookkeeper
        sub = bk.new_namespace(bk.root)
        rs_info = ProverRoundMessageInfo(0, 0, 8, 1, [4])
        messages.append_prover_round(bk.root, _short_round())
        messages.append_prover_round(sub, RoundOracle(rs_info))
        messages.append_prover_round(bk.root, RoundOracle(rs_info))
        assert messages.rounds_with_degree_bounds() == [MsgRoundRef(sub, 0), MsgRoundRef(bk.root, 1)]


class TestMessageTypes:
    def test_round_info(self):
        info = ProverRoundMessageInfo(1, 2, 256, 2, [8])
        assert info.num_oracles == 3
        assert info.num_cosets == 64
        assert info.coset_size == 4
        assert info == ProverRoundMessageInfo(1, 2, 256, 2, [8])
        assert info != ProverRoundMessageInfo(1, 2, 256, 1, [8])
        assert info.with_localization(1).localization_parameter == 1
        assert info.to_dict()["reed_solomon_code_degree_bound"] == [8]

    def test_verifier_message_shapes(self):
        sizes = [FieldElementSize.FULL] * 3
        fe = FieldElements([FR(1), FR(2), FR(3)], sizes)
        assert fe.shape() == ("field_elements", tuple(sizes))
        assert Bytes(b"\x00" * 16).shape() == ("bytes", 16)
        assert Bits([True, False]).shape() == ("bits", 2)
        assert Bytes(b"\x00") != Bits([False] * 8)


# =====================================================================
# Round oracles
# =====================================================================

@pytest.fixture
def recorded_round():
    info = ProverRoundMessageInfo(1, 2, 8, 1)
    a = [FR(i) for i in range(8)]
    b = [FR(100 + i) for i in range(8)]
    tree = MerkleTree(coset_leaves([a, b], 1), MerkleTreeParameters())
    return RecordingRoundOracle(info, [[FR(7)]], [a, b], tree)


class TestRoundOracles:
    def test_coset_leaf_layout(self):
        a = [FR(i) for i in range(8)]
        leaves = coset_leaves([a], 1)
        assert len(leaves) == 4
        assert leaves[0] == [FR(0), FR(4)]
        assert split_leaf([1, 2, 3, 4], 2, 2) == [[1, 2], [3, 4]]

    def test_query_returns_all_oracles_per_position(self, recorded_round):
        result = recorded_round.query([3, 6])
        assert result == [[FR(3), FR(103)], [FR(6), FR(106)]]
        assert recorded_round.queried_cosets == [3, 2]

    def test_query_out_of_bounds(self, recorded_round):
        with pytest.raises(OracleQueryOutOfBounds):
            recorded_round.query([8])
        with pytest.raises(OracleQueryOutOfBounds):
            recorded_round.query_coset([4])
        with pytest.raises(OracleQueryOutOfBounds):
            recorded_round.get_short_message(1)

    def test_short_message_only_round_cannot_be_queried(self):
        with pytest.raises(OracleQueryOutOfBounds):
            _short_round().query([0])
        declared_length = RoundOracle(ProverRoundMessageInfo(1, 0, 8), [[FR(1)]])
        with pytest.raises(OracleQueryOutOfBounds):
            declared_length.query([0])

    def test_succinct_oracle_serves_recorded_answers(self, recorded_round):
        recorded_round.query([3, 6])
        cosets = list(recorded_round.queried_cosets)
        succinct = SuccinctRoundOracle(
            recorded_round.info,
            recorded_round.short_messages,
            cosets,
            [recorded_round.leaf(c) for c in cosets],
        )
        assert succinct.get_short_message(0) == [FR(7)]
        assert succinct.query([3, 6]) == [[FR(3), FR(103)], [FR(6), FR(106)]]
        assert succinct.fully_consumed
        with pytest.raises(MalformedProof):
            succinct.query([3])

    def test_succinct_oracle_rejects_unexpected_query(self, recorded_round):
        succinct = SuccinctRoundOracle(
            recorded_round.info, [[FR(7)]], [3], [recorded_round.leaf(3)]
        )
        with pytest.raises(MalformedProof):
            succinct.query([2])
        assert not succinct.fully_consumed

    def test_succinct_oracle_answer_count(self, recorded_round):
        with pytest.raises(MalformedProof):
            SuccinctRoundOracle(recorded_round.info, [[FR(7)]], [3, 2], [recorded_round.leaf(3)])


# =====================================================================
# Prover / verifier contracts
# =====================================================================

class _VerifierParam:
    pass


class _ProverParam(ProverParam):
    VerifierParameter = _VerifierParam

    def to_verifier_param(self):
        return _VerifierParam()


class _Prover(IOPProver):
    ProverParameter = _ProverParam
    PublicInput = int


class _Verifier(IOPVerifier):
    VerifierParameter = _VerifierParam
    PublicInput = int


class _StrVerifier(_Verifier):
    PublicInput = str


class _RefProver(_Prover):
    RoundOracleRefs = MsgRoundRef


class _RefVerifier(_Verifier):
    OracleRefs = MsgRoundRef


class TestContracts:
    def test_compatible_pair(self):
        pair = ProtocolPair(_Prover, _Verifier)
        assert pair.top_level
        assert isinstance(pair.verifier_parameter(_ProverParam()), _VerifierParam)

    def test_public_input_mismatch(self):
        with pytest.raises(IncompatibleProtocols):
            ProtocolPair(_Prover, _StrVerifier)

    def test_parameter_mismatch(self):
        with pytest.raises(IncompatibleProtocols):
            ProtocolPair(IOPProver, _Verifier)

    def test_oracle_refs_require_nested_use(self):
        with pytest.raises(IncompatibleProtocols):
            ProtocolPair(_RefProver, _RefVerifier)
        pair = ProtocolPair(_RefProver, _RefVerifier, top_level=False)
        assert not pair.top_level
        with pytest.raises(IncompatibleProtocols):
            ProtocolPair(_Prover, _RefVerifier, top_level=False)

    def test_verifier_param_for_plain_values(self):
        assert verifier_param_for(None) is None
        assert verifier_param_for(5) == 5
